"""
Tests d'intégration API pour la connexion et la gestion du personnel.
"""

from presences.schemas.staff import Role, StaffAccount
from presences.services import record_store
from presences.services.record_store import Collection


def add_admin(db, id="adm2"):
    record_store.upsert(db, Collection.USERS, StaffAccount(
        id=id, first_name="Paul", last_name="Roy", username=id, password="pw", role=Role.ADMIN,
    ))


def new_teacher(**kwargs):
    payload = {
        "first_name": "Léa", "last_name": "Petit", "username": "lpetit",
        "password": "pw", "grade": "3", "section": "A",
    }
    payload.update(kwargs)
    return payload


# ============================================================
# POST /api/v1/auth/login
# ============================================================

def test_login_succes(client):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "admin123"})

    assert response.status_code == 200
    assert response.json()["id"] == "admin-1"
    assert response.json()["protected"] is True
    assert "password" not in response.json()


def test_login_echec(client):
    response = client.post("/api/v1/auth/login", json={"username": "admin", "password": "x"})
    assert response.status_code == 401


# ============================================================
# Personnel
# ============================================================

def test_list_staff(client, admin_headers):
    response = client.get("/api/v1/staff", headers=admin_headers)

    assert response.status_code == 200
    assert [u["username"] for u in response.json()] == ["admin"]


def test_create_teacher(client, admin_headers):
    response = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers)

    assert response.status_code == 201
    assert response.json()["role"] == "teacher"
    assert response.json()["protected"] is False


def test_create_teacher_sans_classe(client, admin_headers):
    response = client.post("/api/v1/staff", json=new_teacher(grade=None), headers=admin_headers)
    assert response.status_code == 422


def test_create_identifiant_duplique(client, admin_headers):
    client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers)
    response = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers)

    assert response.status_code == 409


def test_create_admin_par_admin_secondaire(client, db):
    add_admin(db)
    response = client.post(
        "/api/v1/staff",
        json=new_teacher(role="admin", grade=None, section=None),
        headers={"X-Staff-Id": "adm2"},
    )
    assert response.status_code == 403


def test_update_role_protege(client, admin_headers):
    response = client.put("/api/v1/staff/admin-1", json={"role": "teacher"}, headers=admin_headers)
    assert response.status_code == 403


def test_update_introuvable(client, admin_headers):
    response = client.put("/api/v1/staff/inconnu", json={"first_name": "X"}, headers=admin_headers)
    assert response.status_code == 404


def test_toggle_active(client, admin_headers):
    staff_id = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers).json()["id"]

    response = client.post(f"/api/v1/staff/{staff_id}/toggle-active", headers=admin_headers)

    assert response.status_code == 200
    assert response.json()["active"] is False
    # Compte suspendu : connexion et session refusées
    assert client.post("/api/v1/auth/login", json={"username": "lpetit", "password": "pw"}).status_code == 401
    assert client.get("/api/v1/students", headers={"X-Staff-Id": staff_id}).status_code == 401


def test_toggle_active_protege(client, admin_headers):
    assert client.post("/api/v1/staff/admin-1/toggle-active", headers=admin_headers).status_code == 403


def test_delete_staff(client, admin_headers):
    staff_id = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers).json()["id"]

    assert client.delete(f"/api/v1/staff/{staff_id}", headers=admin_headers).status_code == 204
    assert len(client.get("/api/v1/staff", headers=admin_headers).json()) == 1


def test_delete_protege(client, admin_headers):
    assert client.delete("/api/v1/staff/admin-1", headers=admin_headers).status_code == 403


def test_delete_par_admin_secondaire(client, db):
    add_admin(db)
    assert client.delete("/api/v1/staff/admin-1", headers={"X-Staff-Id": "adm2"}).status_code == 403


def test_enseignant_ne_peut_pas_se_reassigner_une_classe(client, db, admin_headers):
    """Un enseignant qui change sa propre classe est refusé et ne peut toujours pas faire l'appel ailleurs."""
    staff_id = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers).json()["id"]
    headers = {"X-Staff-Id": staff_id}

    response = client.put(f"/api/v1/staff/{staff_id}", json={"grade": "5", "section": "B"}, headers=headers)

    assert response.status_code == 403
    commit = client.post("/api/v1/attendance/5-B/2024-03-01", json={"marks": {}}, headers=headers)
    assert commit.status_code == 403


def test_enseignant_modifie_son_nom(client, admin_headers):
    staff_id = client.post("/api/v1/staff", json=new_teacher(), headers=admin_headers).json()["id"]

    response = client.put(f"/api/v1/staff/{staff_id}", json={"last_name": "Martin"}, headers={"X-Staff-Id": staff_id})

    assert response.status_code == 200
    assert response.json()["last_name"] == "Martin"
    assert (response.json()["grade"], response.json()["section"]) == ("3", "A")
