"""
Integration tests for projects and work items.
"""

import pytest

from rab_maker.exceptions import BusinessLogicError, NotFoundError, OwnershipError
from rab_maker.models import ItemType, Material, ProjectItemCost, WorkCategory, WorkItem
from rab_maker.services import project_service


@pytest.fixture
def work_item(session, user1, project, category, template):
    return project_service.create_work_item(
        session, project.id, user1.id,
        category_id=category.id, description='Kolom beton', volume=10.0, unit='m3',
        template_id=template.id
    )


class TestWorkItemLifecycle:

    def test_delete_removes_all_cost_rows(self, session, user1, project, work_item):
        work_item_id = work_item.id
        assert session.query(ProjectItemCost).filter_by(work_item_id=work_item_id).count() == 2

        project_service.delete_work_item(session, work_item_id, project.id, user1.id)

        assert session.get(WorkItem, work_item_id) is None
        assert session.query(ProjectItemCost).filter_by(work_item_id=work_item_id).count() == 0

    def test_delete_project_removes_work_items_and_costs(self, session, user1, project, work_item):
        project_service.delete_project(session, project.id, user1.id)

        assert session.query(WorkItem).count() == 0
        assert session.query(ProjectItemCost).count() == 0

    def test_stale_material_only_labor_is_stored(self, session, user1, project, category, template, semen, pekerja):
        session.query(Material).filter_by(id=semen.id).delete()
        session.commit()

        work_item = project_service.create_work_item(
            session, project.id, user1.id,
            category_id=category.id, description='Kolom beton', volume=2.0, unit='m3',
            template_id=template.id
        )

        costs = session.query(ProjectItemCost).filter_by(work_item_id=work_item.id).all()
        assert len(costs) == 1
        assert costs[0].item_type == ItemType.LABOR
        assert costs[0].master_item_id == pekerja.id

    def test_listing_with_totals(self, session, user1, project, category, work_item):
        project_service.create_work_item(
            session, project.id, user1.id,
            category_id=category.id, description='Pembersihan', volume=1.0, unit='ls'
        )

        rows = project_service.list_work_items(session, project.id)

        assert [r['description'] for r in rows] == ['Kolom beton', 'Pembersihan']
        assert rows[0]['category_name'] == 'Pekerjaan Beton'
        assert rows[0]['template_name'] == 'Beton'
        assert rows[0]['total_cost'] == pytest.approx(1650500.0)
        assert rows[0]['unit_price'] == pytest.approx(165050.0)
        assert rows[1]['template_name'] is None
        assert rows[1]['total_cost'] == 0.0


class TestWorkItemValidation:

    @pytest.mark.parametrize('volume', [0, -1.5])
    def test_volume_must_be_positive(self, session, user1, project, category, volume):
        with pytest.raises(BusinessLogicError):
            project_service.create_work_item(
                session, project.id, user1.id,
                category_id=category.id, description='Galian', volume=volume, unit='m3'
            )

    def test_description_required(self, session, user1, project, category):
        with pytest.raises(BusinessLogicError):
            project_service.create_work_item(
                session, project.id, user1.id,
                category_id=category.id, description='  ', volume=1.0, unit='m3'
            )

    def test_missing_template(self, session, user1, project, category):
        with pytest.raises(NotFoundError):
            project_service.create_work_item(
                session, project.id, user1.id,
                category_id=category.id, description='Galian', volume=1.0, unit='m3',
                template_id=999
            )
        assert session.query(WorkItem).count() == 0


class TestOwnership:

    def test_other_user_cannot_read_work_item(self, session, user2, work_item):
        with pytest.raises(OwnershipError):
            project_service.get_work_item(session, work_item.id, user2.id)

    def test_work_item_must_belong_to_project(self, session, user1, work_item):
        other = project_service.create_project(session, user1.id, 'Gudang', 'Cimahi', 'PT Maju')

        with pytest.raises(OwnershipError):
            project_service.get_work_item(session, work_item.id, user1.id, project_id=other.id)

    def test_other_users_template_cannot_be_used(self, session, user2, template):
        project = project_service.create_project(session, user2.id, 'Ruko', 'Garut', 'Bu Rina')
        category = WorkCategory(user_id=user2.id, name='Pekerjaan Struktur', display_order=1)
        session.add(category)
        session.commit()

        with pytest.raises(OwnershipError):
            project_service.create_work_item(
                session, project.id, user2.id,
                category_id=category.id, description='Kolom', volume=1.0, unit='m3',
                template_id=template.id
            )

    def test_project_name_validation(self, session, user1):
        with pytest.raises(BusinessLogicError):
            project_service.create_project(session, user1.id, 'AB', 'Bandung', 'Pak Joko')
