from sqlalchemy.orm import Session
from timekeeper.models.department import Department


class DepartmentRepository:
    """Repository for Department model operations with multi-tenant support"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_tenant(self, tenant_id: int) -> list[Department]:
        """Get all departments for a tenant"""
        return (
            self.db.query(Department)
            .filter(Department.tenant_id == tenant_id)
            .order_by(Department.name)
            .all()
        )

    def get_by_id_and_tenant(self, department_id: int, tenant_id: int) -> Department | None:
        """
        Get department ensuring it belongs to tenant.

        Returns None if department doesn't exist or belongs to another tenant.
        """
        return (
            self.db.query(Department)
            .filter(Department.id == department_id, Department.tenant_id == tenant_id)
            .first()
        )

    def create(self, department: Department) -> Department:
        """Create new department"""
        self.db.add(department)
        self.db.commit()
        self.db.refresh(department)
        return department

    def update(self, department: Department) -> Department:
        """Update existing department"""
        self.db.commit()
        self.db.refresh(department)
        return department

    def delete(self, department: Department) -> None:
        """Delete department (projects keep running with department_id cleared)"""
        self.db.delete(department)
        self.db.commit()
