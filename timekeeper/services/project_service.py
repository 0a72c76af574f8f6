import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from timekeeper.core.exceptions import NotFoundException, ValidationException
from timekeeper.models.project import (
    AssignmentRole,
    Project,
    ProjectAssignment,
    ProjectStatus,
)
from timekeeper.models.tenant_context import TenantContext
from timekeeper.repositories.department_repository import DepartmentRepository
from timekeeper.repositories.project_repository import ProjectRepository
from timekeeper.repositories.timesheet_repository import TimesheetRepository
from timekeeper.repositories.user_repository import UserRepository
from timekeeper.schemas.project_schemas import AssignmentCreate, ProjectCreate, ProjectUpdate
from timekeeper.services.audit_service import AuditService

logger = logging.getLogger(__name__)

# Columns an explicit null in an update must not clear
NON_NULLABLE_FIELDS = ("name", "color", "status", "priority", "is_billable", "requires_approval")


class ProjectService:
    """Service for project and assignment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProjectRepository(db)
        self.department_repo = DepartmentRepository(db)
        self.user_repo = UserRepository(db)
        self.timesheet_repo = TimesheetRepository(db)
        self.audit = AuditService(db)

    def create_project(self, data: ProjectCreate, context: TenantContext) -> Project:
        """
        Create a project and assign the creator as its lead.

        Both rows are written in one transaction; a failure leaves neither.

        Args:
            data: Project details
            context: Tenant context (tenant_id is taken from here)

        Returns:
            Created project

        Raises:
            NotFoundException: If department or manager is not in this tenant
        """
        self._check_references(data.department_id, data.manager_id, context)

        project = Project(tenant_id=context.tenant_id, **data.model_dump())
        try:
            self.repo.create_no_commit(project)
            self.repo.add_assignment_no_commit(
                ProjectAssignment(
                    tenant_id=context.tenant_id,
                    project_id=project.id,
                    user_id=context.user.id,
                    role=AssignmentRole.LEAD,
                    assigned_by=context.user.id,
                )
            )
            self.audit.record_for(context, "create", "project", project.id, {"name": project.name})
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception("Failed to create project in tenant %s", context.tenant_id)
            raise

        self.db.refresh(project)
        logger.info("Project %s created in tenant %s", project.id, context.tenant_id)
        return project

    def list_projects(
        self, context: TenantContext, status: ProjectStatus | None = None
    ) -> list[Project]:
        """Get all projects in the caller's tenant"""
        return self.repo.get_by_tenant(context.tenant_id, status=status)

    def get_project(self, project_id: int, context: TenantContext) -> Project:
        """
        Get project ensuring tenant ownership.

        Raises:
            NotFoundException: If project not found or belongs to another tenant
        """
        project = self.repo.get_by_id_and_tenant(project_id, context.tenant_id)
        if not project:
            raise NotFoundException(f"Project {project_id} not found")
        return project

    def update_project(
        self, project_id: int, data: ProjectUpdate, context: TenantContext
    ) -> Project:
        """
        Update a project in the caller's tenant.

        Raises:
            NotFoundException: If project or a referenced id is not in this tenant
            ValidationException: If the resulting dates are inverted
        """
        project = self.get_project(project_id, context)
        update_data = data.model_dump(exclude_unset=True)

        self._check_references(
            update_data.get("department_id"), update_data.get("manager_id"), context
        )

        start = update_data.get("start_date", project.start_date)
        end = update_data.get("end_date", project.end_date)
        if start and end and end < start:
            raise ValidationException("end_date must not be before start_date")

        for field, value in update_data.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            setattr(project, field, value)

        self.audit.record_for(context, "update", "project", project.id, {"fields": sorted(update_data)})
        return self.repo.update(project)

    def delete_project(self, project_id: int, context: TenantContext) -> None:
        """
        Delete a project with its tasks and assignments.

        Raises:
            NotFoundException: If project not found or belongs to another tenant
            ValidationException: If time has already been logged against it
        """
        project = self.get_project(project_id, context)
        if self.timesheet_repo.has_entries_for_project(project.id):
            raise ValidationException(
                "Project has logged time and cannot be deleted; set its status to cancelled"
            )
        self.audit.record_for(context, "delete", "project", project.id, {"name": project.name})
        self.repo.delete(project)
        logger.info("Project %s deleted from tenant %s", project_id, context.tenant_id)

    def list_assignments(self, project_id: int, context: TenantContext) -> list[ProjectAssignment]:
        project = self.get_project(project_id, context)
        return self.repo.get_assignments(project.id, context.tenant_id)

    def assign_user(
        self, project_id: int, data: AssignmentCreate, context: TenantContext
    ) -> ProjectAssignment:
        """
        Assign a user of the same tenant to a project.

        Raises:
            NotFoundException: If project or user is not in this tenant
            ValidationException: If the user is already assigned
        """
        project = self.get_project(project_id, context)
        if not self.user_repo.get_by_id_and_tenant(data.user_id, context.tenant_id):
            raise NotFoundException(f"User {data.user_id} not found")
        if self.repo.get_assignment(project.id, data.user_id):
            raise ValidationException("User is already assigned to this project")

        assignment = ProjectAssignment(
            tenant_id=context.tenant_id,
            project_id=project.id,
            user_id=data.user_id,
            role=data.role,
            assigned_by=context.user.id,
        )
        try:
            self.repo.add_assignment_no_commit(assignment)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ValidationException("User is already assigned to this project")
        self.db.refresh(assignment)
        return assignment

    def _check_references(
        self, department_id: int | None, manager_id: int | None, context: TenantContext
    ) -> None:
        if department_id is not None and not self.department_repo.get_by_id_and_tenant(
            department_id, context.tenant_id
        ):
            raise NotFoundException(f"Department {department_id} not found")
        if manager_id is not None and not self.user_repo.get_by_id_and_tenant(
            manager_id, context.tenant_id
        ):
            raise NotFoundException(f"User {manager_id} not found")
