from sqlalchemy.orm import Session

from timekeeper.core.exceptions import NotFoundException
from timekeeper.models.department import Department
from timekeeper.models.tenant_context import TenantContext
from timekeeper.repositories.department_repository import DepartmentRepository
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.schemas.department_schemas import DepartmentCreate, DepartmentUpdate


class DepartmentService:
    """Service for department business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = DepartmentRepository(db)
        self.user_repo = UserRepository(db)

    def create_department(self, data: DepartmentCreate, context: TenantContext) -> Department:
        """Create a department in the caller's tenant"""
        self._check_manager(data.manager_id, context)
        department = Department(
            tenant_id=context.tenant_id,
            name=data.name,
            description=data.description,
            manager_id=data.manager_id,
        )
        return self.repo.create(department)

    def list_departments(self, context: TenantContext) -> list[Department]:
        return self.repo.get_by_tenant(context.tenant_id)

    def get_department(self, department_id: int, context: TenantContext) -> Department:
        """
        Get department ensuring tenant ownership.

        Raises:
            NotFoundException: If department not found or belongs to another tenant
        """
        department = self.repo.get_by_id_and_tenant(department_id, context.tenant_id)
        if not department:
            raise NotFoundException(f"Department {department_id} not found")
        return department

    def update_department(
        self, department_id: int, data: DepartmentUpdate, context: TenantContext
    ) -> Department:
        department = self.get_department(department_id, context)
        update_data = data.model_dump(exclude_unset=True)
        if "manager_id" in update_data:
            self._check_manager(update_data["manager_id"], context)

        for field, value in update_data.items():
            if value is None and field in ("name", "is_active"):
                continue
            setattr(department, field, value)
        return self.repo.update(department)

    def delete_department(self, department_id: int, context: TenantContext) -> None:
        department = self.get_department(department_id, context)
        self.repo.delete(department)

    def _check_manager(self, manager_id: int | None, context: TenantContext) -> None:
        if manager_id is None:
            return
        if not self.user_repo.get_by_id_and_tenant(manager_id, context.tenant_id):
            raise NotFoundException(f"User {manager_id} not found")
