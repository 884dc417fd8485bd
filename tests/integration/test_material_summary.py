"""
Integration tests for material and labor summaries.
"""

import pytest

from rab_maker.exceptions import StorageError
from rab_maker.models import Material, Project
from rab_maker.services import material_summary_service, project_service
from rab_maker.services.catalog_service import update_material
from rab_maker.services.material_summary_service import (
    get_project_summary, project_total_cost, summarize_all,
    summarize_project, summarize_project_detailed,
)


def _add_work_item(session, user, project, category, template, volume, description='Item'):
    return project_service.create_work_item(
        session, project.id, user.id,
        category_id=category.id, description=description, volume=volume, unit='m3',
        template_id=template.id
    )


def _row(summary, item_type, item_id):
    return next(s for s in summary if s['item_type'] == item_type and s['item_id'] == item_id)


class TestProjectSummary:

    def test_same_material_is_grouped(self, session, user1, project, category, template, semen):
        _add_work_item(session, user1, project, category, template, 10.0, 'Kolom')
        _add_work_item(session, user1, project, category, template, 20.0, 'Balok')

        summary = summarize_project(session, project.id)

        semen_rows = [s for s in summary if s['item_type'] == 'MATERIAL']
        assert len(semen_rows) == 1
        assert semen_rows[0]['item_id'] == semen.id
        assert semen_rows[0]['unit'] == 'zak'
        assert semen_rows[0]['total_quantity'] == pytest.approx(15.0, abs=1e-9)
        assert semen_rows[0]['total_cost'] == pytest.approx(1500.0, abs=1e-9)

    def test_ordered_by_type_then_name(self, session, user1, project, category, template, sand_template):
        _add_work_item(session, user1, project, category, template, 1.0)
        _add_work_item(session, user1, project, category, sand_template, 1.0)

        summary = summarize_project(session, project.id)

        assert [(s['item_type'], s['item_name']) for s in summary] == [
            ('LABOR', 'Pekerja'),
            ('MATERIAL', 'Pasir'),
            ('MATERIAL', 'Semen'),
        ]

    def test_empty_project(self, session, project):
        assert summarize_project(session, project.id) == []
        assert project_total_cost(session, project.id) == 0.0

    def test_name_comes_from_live_catalog(self, session, user1, project, category, template, semen):
        _add_work_item(session, user1, project, category, template, 10.0)
        update_material(session, semen.id, user1.id, name='Semen PCC', unit='sak', unit_price=100.0)

        row = _row(summarize_project(session, project.id), 'MATERIAL', semen.id)
        assert row['item_name'] == 'Semen PCC'
        assert row['unit'] == 'sak'

    def test_cost_rows_of_deleted_catalog_entry_are_left_out(self, session, user1, project, category, template, semen):
        _add_work_item(session, user1, project, category, template, 10.0)
        session.query(Material).filter_by(id=semen.id).delete()
        session.commit()

        summary = summarize_project(session, project.id)
        assert [s['item_type'] for s in summary] == ['LABOR']


class TestPortfolioSummary:

    def test_summary_spans_owner_projects(self, session, user1, user2, project, category, template, semen):
        other_project = Project(user_id=user1.id, name='Gudang', location='Cimahi', client_name='PT Maju')
        foreign_project = Project(user_id=user2.id, name='Ruko', location='Garut', client_name='Bu Rina')
        session.add_all([other_project, foreign_project])
        session.commit()

        _add_work_item(session, user1, project, category, template, 10.0)
        _add_work_item(session, user1, other_project, category, template, 2.0)

        summary = summarize_all(session, user1.id)

        row = _row(summary, 'MATERIAL', semen.id)
        assert row['total_quantity'] == pytest.approx(6.0, abs=1e-9)
        assert summarize_all(session, user2.id) == []


class TestDetailedSummary:

    def test_breakdown_per_work_item(self, session, user1, project, category, template, semen):
        first = _add_work_item(session, user1, project, category, template, 10.0, 'Kolom')
        second = _add_work_item(session, user1, project, category, template, 20.0, 'Balok')

        row = _row(summarize_project_detailed(session, project.id), 'MATERIAL', semen.id)

        assert [b['work_item_id'] for b in row['work_item_breakdown']] == [first.id, second.id]
        breakdown = row['work_item_breakdown'][1]
        assert breakdown['work_item_desc'] == 'Balok'
        assert breakdown['volume'] == 20.0
        assert breakdown['coefficient'] == 0.5
        assert breakdown['quantity'] == pytest.approx(10.0, abs=1e-9)
        assert breakdown['cost'] == pytest.approx(1000.0, abs=1e-9)
        assert sum(b['cost'] for b in row['work_item_breakdown']) == pytest.approx(row['total_cost'])

    def test_project_summary_with_totals(self, session, user1, project, category, template):
        _add_work_item(session, user1, project, category, template, 10.0)

        result = get_project_summary(session, project.id)

        assert result['detailed'] is True
        assert result['totals']['material_cost'] == pytest.approx(500.0)
        assert result['totals']['labor_cost'] == pytest.approx(1650000.0)
        assert result['totals']['total_cost'] == pytest.approx(project_total_cost(session, project.id))

    def test_falls_back_to_plain_summary(self, session, user1, project, category, template, monkeypatch):
        _add_work_item(session, user1, project, category, template, 10.0)

        def _fail(*args, **kwargs):
            raise StorageError('query gagal')

        monkeypatch.setattr(material_summary_service, 'summarize_project_detailed', _fail)

        result = get_project_summary(session, project.id)

        assert result['detailed'] is False
        assert len(result['items']) == 2
        assert all(item['work_item_breakdown'] == [] for item in result['items'])
