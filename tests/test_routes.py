"""
HTTP surface: role guards, status codes and error mapping.
"""
import pytest

from app.features.permissions.roles import Role
from tests.conftest import auth_headers


def create_payload(role, email="created@example.com", **overrides):
    payload = {
        "email": email,
        "password": "securepassword123",
        "first_name": "Created",
        "last_name": "User",
        "role": role,
    }
    payload.update(overrides)
    return payload


class TestListUsers:
    async def test_hr_list_is_filtered_by_view_scope(self, client, make_user):
        hr = await make_user(Role.HR)
        for role in (Role.ADMIN, Role.MANAGER, Role.RECRUITER, Role.EMPLOYEE, Role.CANDIDATE):
            await make_user(role)

        response = await client.get("/users/", headers=auth_headers(hr))

        assert response.status_code == 200
        roles = {user["role"] for user in response.json()}
        assert roles == {"hr", "recruiter", "employee", "candidate"}
        assert all("password_hash" not in user for user in response.json())

    async def test_role_query_parameter(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        employee = await make_user(Role.EMPLOYEE)
        await make_user(Role.CANDIDATE)

        response = await client.get("/users/", params={"role": "employee"}, headers=auth_headers(admin))

        assert [user["id"] for user in response.json()] == [employee.id]

    @pytest.mark.parametrize("role", [Role.RECRUITER, Role.MANAGER, Role.EMPLOYEE, Role.CANDIDATE])
    async def test_other_roles_are_refused(self, client, make_user, role):
        actor = await make_user(role)

        response = await client.get("/users/", headers=auth_headers(actor))

        assert response.status_code == 403
        assert response.json()["detail"] == "Access denied"


class TestCreateUser:
    async def test_hr_creates_employee(self, client, make_user):
        hr = await make_user(Role.HR)

        response = await client.post("/users/", json=create_payload("employee"), headers=auth_headers(hr))

        assert response.status_code == 201
        body = response.json()
        assert body["role"] == "employee"
        assert body["profile_completed"] is True
        assert "password" not in body and "password_hash" not in body

    async def test_created_candidate_must_complete_profile(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.post("/users/", json=create_payload("candidate"), headers=auth_headers(admin))

        assert response.status_code == 201
        assert response.json()["profile_completed"] is False

    async def test_hr_cannot_create_admin(self, client, make_user):
        hr = await make_user(Role.HR)

        response = await client.post("/users/", json=create_payload("admin"), headers=auth_headers(hr))

        assert response.status_code == 403
        assert "admin" in response.json()["detail"]

    async def test_duplicate_email_conflict(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        await make_user(Role.CANDIDATE, email="existing.user@example.com")

        response = await client.post(
            "/users/", json=create_payload("candidate", email="existing.user@example.com"), headers=auth_headers(admin)
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "An account with this email already exists"

    async def test_invalid_role_is_a_validation_error(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.post("/users/", json=create_payload("superuser"), headers=auth_headers(admin))

        assert response.status_code == 400
        assert "role" in response.json()

    async def test_short_password_is_a_validation_error(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.post("/users/", json=create_payload("hr", password="short"), headers=auth_headers(admin))

        assert response.status_code == 400
        assert "password" in response.json()

    async def test_multibyte_password_over_bcrypt_limit_is_a_validation_error(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        password = "\u00e9" * 72

        response = await client.post("/users/", json=create_payload("hr", password=password), headers=auth_headers(admin))

        assert response.status_code == 400
        assert "password" in response.json()

    async def test_created_user_can_log_in(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        await client.post("/users/", json=create_payload("recruiter"), headers=auth_headers(admin))

        response = await client.post(
            "/auth/login", json={"email": "created@example.com", "password": "securepassword123"}
        )

        assert response.status_code == 200
        assert response.json()["user"]["role"] == "recruiter"


class TestUpdateUser:
    async def test_hr_updates_employee(self, client, make_user):
        hr = await make_user(Role.HR)
        employee = await make_user(Role.EMPLOYEE)

        response = await client.put(
            f"/users/{employee.id}", json={"phone": "+221771234568"}, headers=auth_headers(hr)
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "+221771234568"

    async def test_self_edit_is_refused(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.put(f"/users/{admin.id}", json={"phone": "1"}, headers=auth_headers(admin))

        assert response.status_code == 403

    async def test_hr_cannot_promote_to_hr(self, client, make_user):
        hr = await make_user(Role.HR)
        employee = await make_user(Role.EMPLOYEE)

        response = await client.put(f"/users/{employee.id}", json={"role": "hr"}, headers=auth_headers(hr))

        assert response.status_code == 403

    async def test_unknown_user(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.put("/users/01HZZZZZZZZZZZZZZZZZZZZZZZ", json={"phone": "1"}, headers=auth_headers(admin))

        assert response.status_code == 404

    async def test_recruiter_is_stopped_by_the_route_guard(self, client, make_user):
        recruiter = await make_user(Role.RECRUITER)
        candidate = await make_user(Role.CANDIDATE)

        response = await client.put(f"/users/{candidate.id}", json={"phone": "1"}, headers=auth_headers(recruiter))

        assert response.status_code == 403

    async def test_multibyte_password_over_bcrypt_limit_is_refused(self, client, make_user):
        hr = await make_user(Role.HR)
        employee = await make_user(Role.EMPLOYEE)

        response = await client.put(
            f"/users/{employee.id}", json={"password": "\u00e9" * 40}, headers=auth_headers(hr)
        )

        assert response.status_code == 400
        assert "password" in response.json()


class TestDeleteUser:
    async def test_admin_deletes_user(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        candidate = await make_user(Role.CANDIDATE)

        response = await client.delete(f"/users/{candidate.id}", headers=auth_headers(admin))
        follow_up = await client.get(f"/users/{candidate.id}", headers=auth_headers(admin))

        assert response.status_code == 204
        assert follow_up.status_code == 404

    async def test_admin_cannot_delete_self(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.delete(f"/users/{admin.id}", headers=auth_headers(admin))

        assert response.status_code == 403

    async def test_hr_cannot_delete(self, client, make_user):
        hr = await make_user(Role.HR)
        candidate = await make_user(Role.CANDIDATE)

        response = await client.delete(f"/users/{candidate.id}", headers=auth_headers(hr))

        assert response.status_code == 403


class TestCurrentUser:
    async def test_me(self, client, make_user):
        candidate = await make_user(Role.CANDIDATE)

        response = await client.get("/users/me", headers=auth_headers(candidate))

        assert response.status_code == 200
        assert response.json()["email"] == candidate.email

    async def test_only_plural_prefix_is_mounted(self, client, make_user):
        candidate = await make_user(Role.CANDIDATE)

        response = await client.get("/user/me", headers=auth_headers(candidate))

        assert response.status_code == 404

    async def test_patch_me_cannot_change_role(self, client, make_user):
        candidate = await make_user(Role.CANDIDATE)

        response = await client.patch(
            "/users/me", json={"phone": "+33123456789", "role": "admin"}, headers=auth_headers(candidate)
        )

        assert response.status_code == 200
        assert response.json()["phone"] == "+33123456789"
        assert response.json()["role"] == "candidate"

    async def test_complete_profile(self, client, make_user):
        candidate = await make_user(Role.CANDIDATE)
        form = {
            "first_name": "Awa",
            "last_name": "Diop",
            "phone": "+221770000000",
            "birth_date": "1995-04-12",
            "nationality": "Senegalese",
            "address": "12 Rue Carnot, Dakar",
        }

        response = await client.put("/users/me/complete", json=form, headers=auth_headers(candidate))

        assert response.status_code == 200
        body = response.json()
        assert body["profile_completed"] is True
        assert body["birth_date"] == "1995-04-12"
        assert body["address"] == "12 Rue Carnot, Dakar"

    async def test_complete_profile_requires_identity_fields(self, client, make_user):
        candidate = await make_user(Role.CANDIDATE)

        response = await client.put("/users/me/complete", json={"first_name": "Awa"}, headers=auth_headers(candidate))

        assert response.status_code == 400

    async def test_my_permissions(self, client, make_user):
        hr = await make_user(Role.HR)

        response = await client.get("/users/me/permissions", headers=auth_headers(hr))

        body = response.json()
        assert body["role"] == "hr"
        assert body["can_create_users"] is True
        assert body["can_delete_users"] is False
        assert body["can_manage_roles"] == ["candidate", "employee"]


class TestRoleHelpers:
    async def test_available_roles_for_admin(self, client, make_user):
        admin = await make_user(Role.ADMIN)

        response = await client.get("/users/available-roles", headers=auth_headers(admin))

        assert [item["role"] for item in response.json()] == [
            "admin", "hr", "recruiter", "manager", "employee", "candidate"
        ]

    async def test_available_roles_for_recruiter(self, client, make_user):
        recruiter = await make_user(Role.RECRUITER)

        response = await client.get("/users/available-roles", headers=auth_headers(recruiter))

        assert response.status_code == 200
        assert response.json() == []

    async def test_temporary_password(self, client, make_user):
        hr = await make_user(Role.HR)

        response = await client.get("/users/temporary-password", headers=auth_headers(hr))

        assert response.status_code == 200
        assert len(response.json()["password"]) == 12

    async def test_temporary_password_needs_staff_manager(self, client, make_user):
        employee = await make_user(Role.EMPLOYEE)

        response = await client.get("/users/temporary-password", headers=auth_headers(employee))

        assert response.status_code == 403


class TestPermissionRoutes:
    async def test_role_catalog(self, client, make_user):
        employee = await make_user(Role.EMPLOYEE)

        response = await client.get("/permissions/roles", headers=auth_headers(employee))

        assert response.status_code == 200
        assert len(response.json()) == 6

    async def test_role_permissions_admin_only(self, client, make_user):
        admin = await make_user(Role.ADMIN)
        hr = await make_user(Role.HR)

        allowed = await client.get("/permissions/roles/recruiter", headers=auth_headers(admin))
        refused = await client.get("/permissions/roles/recruiter", headers=auth_headers(hr))

        assert allowed.status_code == 200
        assert allowed.json()["can_view_users"] == ["candidate"]
        assert refused.status_code == 403

    @pytest.mark.parametrize("role,module,accessible", [
        (Role.ADMIN, "payroll", True),
        (Role.HR, "payroll", True),
        (Role.RECRUITER, "payroll", False),
        (Role.RECRUITER, "interviews", True),
        (Role.MANAGER, "reports", True),
        (Role.CANDIDATE, "candidates", False),
    ])
    async def test_module_access(self, client, make_user, role, module, accessible):
        actor = await make_user(role)

        response = await client.get(f"/permissions/modules/{module}", headers=auth_headers(actor))

        assert response.json() == {"module": module, "accessible": accessible}


async def test_health(client):
    response = await client.get("/health")

    assert response.json() == {"status": "healthy"}
