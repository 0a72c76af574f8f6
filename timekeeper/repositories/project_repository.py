from typing import Optional
from sqlalchemy.orm import Session

from timekeeper.models.project import Project, ProjectAssignment, ProjectStatus


class ProjectRepository:
    """Repository for Project and ProjectAssignment data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_tenant(
        self, tenant_id: int, status: Optional[ProjectStatus] = None
    ) -> list[Project]:
        """Get all projects for a tenant, optionally filtered by status"""
        query = self.db.query(Project).filter(Project.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Project.status == status)
        return query.order_by(Project.name, Project.id).all()

    def get_by_id_and_tenant(self, project_id: int, tenant_id: int) -> Optional[Project]:
        """
        Get project by ID, ensuring it belongs to the tenant.

        Returns:
            Project object or None if not found or belongs to different tenant
        """
        return (
            self.db.query(Project)
            .filter(Project.id == project_id, Project.tenant_id == tenant_id)
            .first()
        )

    def count_by_status(self, tenant_id: int, status: ProjectStatus) -> int:
        """Count tenant projects in a given status"""
        return (
            self.db.query(Project)
            .filter(Project.tenant_id == tenant_id, Project.status == status)
            .count()
        )

    def create_no_commit(self, project: Project) -> Project:
        """Add project and assign its ID without committing (for atomic ops)"""
        self.db.add(project)
        self.db.flush()
        return project

    def update(self, project: Project) -> Project:
        """Update a project"""
        self.db.commit()
        self.db.refresh(project)
        return project

    def delete(self, project: Project) -> None:
        """Delete a project (cascades to tasks and assignments)"""
        self.db.delete(project)
        self.db.commit()

    def get_assignments(self, project_id: int, tenant_id: int) -> list[ProjectAssignment]:
        """Get all assignments of a project"""
        return (
            self.db.query(ProjectAssignment)
            .filter(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.tenant_id == tenant_id,
            )
            .order_by(ProjectAssignment.id)
            .all()
        )

    def get_assignment(self, project_id: int, user_id: int) -> Optional[ProjectAssignment]:
        """Get a single user's assignment on a project"""
        return (
            self.db.query(ProjectAssignment)
            .filter(
                ProjectAssignment.project_id == project_id,
                ProjectAssignment.user_id == user_id,
            )
            .first()
        )

    def add_assignment_no_commit(self, assignment: ProjectAssignment) -> ProjectAssignment:
        """Add assignment without committing (caller commits)"""
        self.db.add(assignment)
        self.db.flush()
        return assignment
