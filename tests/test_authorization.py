"""
Route allow-lists.

Roles are flat: a route lists every role it admits and no role inherits
another's access.
"""

import asyncio

import pytest

from timekeeper.core.exceptions import ForbiddenException
from timekeeper.dependencies import require_roles
from timekeeper.models.role import UserRole
from timekeeper.models.tenant_context import TenantContext


class TestRequireRoles:
    """Unit tests for the require_roles dependency factory"""

    def test_listed_role_passes(self, alice, acme):
        context = TenantContext(user=alice, tenant=acme, token_payload={})
        check = require_roles(UserRole.USER)
        assert asyncio.run(check(context)) is context

    def test_unlisted_role_rejected(self, olivia, acme):
        """OWNER does not pass a route that lists only ADMIN"""
        context = TenantContext(user=olivia, tenant=acme, token_payload={})
        check = require_roles(UserRole.ADMIN)
        with pytest.raises(ForbiddenException):
            asyncio.run(check(context))


ADMIN_ONLY = [
    ("get", "/api/users", None),
    ("get", "/api/audit-logs", None),
    ("patch", "/api/tenants/me", {"name": "Renamed"}),
]

APPROVER_ONLY = [
    ("post", "/api/projects", {"name": "New Project"}),
    ("post", "/api/departments", {"name": "Engineering"}),
    ("get", "/api/approvals", None),
    ("get", "/api/reports/timesheets", None),
    ("get", "/api/dashboard/stats", None),
    ("post", "/api/invite", {"email": "x@acme.example.com", "first_name": "X", "last_name": "Y"}),
]


def _call(client, method, path, headers, body):
    kwargs = {"headers": headers}
    if body is not None:
        kwargs["json"] = body
    return getattr(client, method)(path, **kwargs)


class TestAdminRoutes:
    """users, audit logs and tenant update: ADMIN and OWNER"""

    @pytest.mark.parametrize("method,path,body", ADMIN_ONLY)
    def test_user_forbidden(self, client, alice_headers, method, path, body):
        assert _call(client, method, path, alice_headers, body).status_code == 403

    @pytest.mark.parametrize("method,path,body", ADMIN_ONLY)
    def test_manager_forbidden(self, client, bob_headers, method, path, body):
        assert _call(client, method, path, bob_headers, body).status_code == 403

    @pytest.mark.parametrize("method,path,body", ADMIN_ONLY)
    def test_admin_allowed(self, client, carol_headers, method, path, body):
        assert _call(client, method, path, carol_headers, body).status_code == 200

    @pytest.mark.parametrize("method,path,body", ADMIN_ONLY)
    def test_owner_allowed(self, client, olivia_headers, method, path, body):
        assert _call(client, method, path, olivia_headers, body).status_code == 200


class TestApproverRoutes:
    """projects/departments writes, approvals, reports, invite: MANAGER, ADMIN, OWNER"""

    @pytest.mark.parametrize("method,path,body", APPROVER_ONLY)
    def test_user_forbidden(self, client, alice_headers, method, path, body):
        assert _call(client, method, path, alice_headers, body).status_code == 403

    @pytest.mark.parametrize("method,path,body", APPROVER_ONLY)
    def test_manager_allowed(self, client, bob_headers, method, path, body):
        assert _call(client, method, path, bob_headers, body).status_code in (200, 201)

    @pytest.mark.parametrize("method,path,body", APPROVER_ONLY)
    def test_owner_allowed(self, client, olivia_headers, method, path, body):
        assert _call(client, method, path, olivia_headers, body).status_code in (200, 201)


class TestAnyRoleRoutes:
    """Authenticated routes open to every role"""

    @pytest.mark.parametrize(
        "path", ["/api/user", "/api/projects", "/api/tasks", "/api/timesheets", "/api/departments"]
    )
    def test_user_allowed(self, client, alice_headers, path):
        assert client.get(path, headers=alice_headers).status_code == 200

    @pytest.mark.parametrize(
        "path", ["/api/user", "/api/projects", "/api/tasks", "/api/timesheets", "/api/departments"]
    )
    def test_anonymous_rejected(self, client, path):
        assert client.get(path).status_code == 401
