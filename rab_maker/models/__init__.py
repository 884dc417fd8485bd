"""Models package - exports all SQLAlchemy models."""
# Core Models
from rab_maker.models.app_user import AppUser

# Reference catalogs
from rab_maker.models.material import Material
from rab_maker.models.labor_type import LaborType
from rab_maker.models.work_category import WorkCategory

# Unit-price analysis
from rab_maker.models.ahsp_template import AHSPTemplate
from rab_maker.models.template_component import ItemType, TemplateMaterialComponent, TemplateLaborComponent

# Projects and costs
from rab_maker.models.project import Project
from rab_maker.models.work_item import WorkItem
from rab_maker.models.project_item_cost import ProjectItemCost

__all__ = [
    'AppUser',
    'Material', 'LaborType', 'WorkCategory',
    'AHSPTemplate', 'ItemType', 'TemplateMaterialComponent', 'TemplateLaborComponent',
    'Project', 'WorkItem', 'ProjectItemCost',
]
