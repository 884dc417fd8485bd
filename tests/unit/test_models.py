"""
Unit tests for SQLAlchemy models.
"""

import pytest
from sqlalchemy.exc import IntegrityError

from rab_maker.models import (
    AppUser, Material, AHSPTemplate, ItemType, ProjectItemCost,
    TemplateMaterialComponent, TemplateLaborComponent, WorkItem,
)


class TestAppUserModel:
    """Tests for AppUser model."""

    def test_create_user(self, session):
        user = AppUser(username='andi', full_name='Andi', active=True)
        user.set_password('securepassword')
        session.add(user)
        session.commit()

        assert user.id is not None
        assert user.password_hash is not None
        assert user.password_hash != 'securepassword'

    def test_password_hashing(self, session):
        user = AppUser(username='andi', active=True)
        user.set_password('mypassword')

        assert user.check_password('mypassword') is True
        assert user.check_password('wrongpassword') is False

    def test_username_unique(self, session, user1):
        session.add(AppUser(username=user1.username))

        with pytest.raises(IntegrityError):
            session.commit()


class TestCatalogModels:

    def test_system_material(self, session):
        material = Material(user_id=None, name='Semen Portland', unit='zak', unit_price=65000)
        session.add(material)
        session.commit()

        data = material.to_dict()
        assert data['is_system'] is True
        assert data['unit_price'] == 65000

    def test_negative_price_rejected(self, session, user1):
        session.add(Material(user_id=user1.id, name='Aneh', unit='kg', unit_price=-1))

        with pytest.raises(IntegrityError):
            session.commit()


class TestTemplateModels:

    def test_component_item_type(self, template):
        material_component = template.material_components[0]
        labor_component = template.labor_components[0]

        assert material_component.item_type == ItemType.MATERIAL
        assert labor_component.item_type == ItemType.LABOR
        assert material_component.to_dict()['item_type'] == 'MATERIAL'
        assert labor_component.to_dict()['item_id'] == labor_component.labor_type_id

    def test_coefficient_must_be_positive(self, session, template, semen):
        session.add(TemplateMaterialComponent(template_id=template.id, material_id=semen.id, coefficient=0))

        with pytest.raises(IntegrityError):
            session.commit()

    def test_deleting_template_removes_components(self, session, template):
        template_id = template.id
        session.delete(template)
        session.commit()

        assert session.get(AHSPTemplate, template_id) is None
        assert session.query(TemplateMaterialComponent).filter_by(template_id=template_id).count() == 0
        assert session.query(TemplateLaborComponent).filter_by(template_id=template_id).count() == 0


class TestProjectItemCostModel:

    def test_item_type_stored_as_text(self, session, project, category):
        work_item = WorkItem(
            project_id=project.id, category_id=category.id,
            description='Galian', volume=2.0, unit='m3'
        )
        session.add(work_item)
        session.flush()

        cost = ProjectItemCost(
            work_item_id=work_item.id,
            item_type=ItemType.LABOR,
            master_item_id=7,
            item_name='Pekerja',
            coefficient=1.0,
            quantity_needed=2.0,
            unit_price_at_creation=100.0,
            total_cost=200.0,
        )
        session.add(cost)
        session.commit()
        session.expire_all()

        stored = session.get(ProjectItemCost, cost.id)
        assert stored.item_type == ItemType.LABOR
        assert stored.to_dict()['item_id'] == 7
        assert stored.to_dict()['item_type'] == 'LABOR'
