"""
Dashboard service.
Provides portfolio-level figures for the dashboard view.
"""

from sqlalchemy import func
from rab_maker.models import AHSPTemplate, Project, ProjectItemCost, WorkItem


def get_dashboard_data(session, user_id: int, recent_limit: int = 5) -> dict:
    """
    Get all dashboard data for a user.

    Args:
        session: SQLAlchemy session
        user_id: Current user ID
        recent_limit: Number of recent projects to return

    Returns:
        dict with keys:
            - project_count: int
            - template_count: int
            - total_cost: float (all cost rows of all the user's projects)
            - recent_projects: list of dicts with the project's total_cost
    """

    # 1. Counts
    project_count = session.query(func.count(Project.id)).filter(
        Project.user_id == user_id
    ).scalar() or 0

    template_count = session.query(func.count(AHSPTemplate.id)).filter(
        AHSPTemplate.user_id == user_id
    ).scalar() or 0

    # 2. Portfolio total
    total_cost = session.query(
        func.coalesce(func.sum(ProjectItemCost.total_cost), 0.0)
    ).join(
        WorkItem, WorkItem.id == ProjectItemCost.work_item_id
    ).join(
        Project, Project.id == WorkItem.project_id
    ).filter(
        Project.user_id == user_id
    ).scalar() or 0.0

    # 3. Recent projects with their totals
    recent = session.query(Project).filter(
        Project.user_id == user_id
    ).order_by(Project.created_at.desc(), Project.id.desc()).limit(recent_limit).all()

    project_totals = {}
    if recent:
        project_totals = dict(
            session.query(
                WorkItem.project_id,
                func.sum(ProjectItemCost.total_cost)
            ).join(
                ProjectItemCost, ProjectItemCost.work_item_id == WorkItem.id
            ).filter(
                WorkItem.project_id.in_([p.id for p in recent])
            ).group_by(WorkItem.project_id).all()
        )

    recent_projects = []
    for project in recent:
        row = project.to_dict()
        row['total_cost'] = float(project_totals.get(project.id) or 0.0)
        recent_projects.append(row)

    return {
        'project_count': project_count,
        'template_count': template_count,
        'total_cost': float(total_cost),
        'recent_projects': recent_projects,
    }
