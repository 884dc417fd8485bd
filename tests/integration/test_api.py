"""
HTTP flow tests for the JSON blueprints.
"""

import pytest

from rab_maker.models import ProjectItemCost, WorkCategory, WorkItem


class TestAuthRequired:

    @pytest.mark.parametrize('path', ['/materials/', '/ahsp/', '/projects/', '/summary/', '/dashboard/'])
    def test_anonymous_is_rejected(self, client, path):
        response = client.get(path)

        assert response.status_code == 401
        assert response.get_json()['status'] == 'error'

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['database'] == 'connected'

    def test_app_registers_no_template_filters(self, app):
        for name in ('num_id', 'money_idr', 'date_id'):
            assert name not in app.jinja_env.filters


class TestCatalogEndpoints:

    def test_create_and_list_materials(self, authenticated_client):
        response = authenticated_client.post('/materials/new', json={
            'name': 'Besi beton', 'unit': 'kg', 'unit_price': '15.000,50'
        })
        assert response.status_code == 201
        assert response.get_json()['material']['unit_price'] == 15000.5

        response = authenticated_client.get('/materials/?q=besi')
        names = [m['name'] for m in response.get_json()['materials']]
        assert names == ['Besi beton']

    def test_invalid_price(self, authenticated_client):
        response = authenticated_client.post('/materials/new', json={
            'name': 'Besi beton', 'unit': 'kg', 'unit_price': 'murah'
        })

        assert response.status_code == 400
        assert 'Harga satuan' in response.get_json()['message']

    def test_form_post(self, authenticated_client):
        response = authenticated_client.post('/labor-types/new', data={
            'name': 'Tukang las', 'unit': 'OH', 'daily_wage': '145000'
        })

        assert response.status_code == 201
        assert response.get_json()['labor_type']['daily_wage'] == 145000.0

    def test_other_users_material(self, client, user2, semen):
        with client.session_transaction() as sess:
            sess['user_id'] = user2.id

        response = client.get(f'/materials/{semen.id}')

        assert response.status_code == 403

    def test_missing_material(self, authenticated_client):
        assert authenticated_client.get('/materials/9999').status_code == 404

    def test_delete_preview_and_delete(self, authenticated_client, template, semen):
        semen_id = semen.id

        preview = authenticated_client.get(f'/materials/{semen_id}/delete').get_json()
        assert preview['can_delete'] is True
        assert 'komponen' in preview['reason']

        response = authenticated_client.post(f'/materials/{semen_id}/delete')
        assert response.status_code == 200
        assert response.get_json()['components_deleted'] == 1


class TestEstimateFlow:

    def test_full_flow(self, authenticated_client, session, semen, pekerja, category):
        client = authenticated_client

        template = client.post('/ahsp/new', json={'name': 'Beton K-225', 'unit': 'm3'}).get_json()['template']
        assert client.post(f"/ahsp/{template['id']}/components/material", json={
            'item_id': semen.id, 'coefficient': '0,5'
        }).status_code == 201
        assert client.post(f"/ahsp/{template['id']}/components/labor", json={
            'item_id': pekerja.id, 'coefficient': 1.5
        }).status_code == 201

        detail = client.get(f"/ahsp/{template['id']}").get_json()['template']
        assert detail['unit_price'] == pytest.approx(0.5 * 100 + 1.5 * 110000)
        assert len(detail['material_components']) == 1
        assert detail['material_components'][0]['missing'] is False

        project = client.post('/projects/new', json={
            'name': 'Rumah Tinggal', 'location': 'Bandung', 'client_name': 'Pak Joko'
        }).get_json()['project']

        response = client.post(f"/projects/{project['id']}/work-items/new", json={
            'category_id': category.id,
            'description': 'Kolom beton',
            'volume': '10',
            'unit': 'm3',
            'template_id': template['id'],
        })
        assert response.status_code == 201
        work_item = response.get_json()['work_item']

        costs = client.get(f"/projects/{project['id']}/work-items/{work_item['id']}/costs").get_json()
        assert len(costs['costs']) == 2
        assert costs['total_cost'] == pytest.approx(1650500.0)

        view = client.get(f"/projects/{project['id']}").get_json()
        assert view['total_cost'] == pytest.approx(1650500.0)
        assert view['work_items'][0]['template_name'] == 'Beton K-225'

        summary = client.get(f"/summary/projects/{project['id']}").get_json()
        assert [i['item_type'] for i in summary['items']] == ['LABOR', 'MATERIAL']

        detailed = client.get(f"/summary/projects/{project['id']}/detailed").get_json()
        assert detailed['detailed'] is True
        assert detailed['items'][1]['work_item_breakdown'][0]['work_item_desc'] == 'Kolom beton'

        portfolio = client.get('/summary/').get_json()
        assert portfolio['totals']['total_cost'] == pytest.approx(1650500.0)

        dashboard = client.get('/dashboard/').get_json()
        assert dashboard['project_count'] == 1
        assert dashboard['template_count'] == 1
        assert dashboard['recent_projects'][0]['total_cost'] == pytest.approx(1650500.0)

        response = client.post(f"/projects/{project['id']}/work-items/{work_item['id']}/delete")
        assert response.status_code == 200
        assert session.query(ProjectItemCost).count() == 0

    def test_pdf_export(self, authenticated_client, session, user1, project, category, template):
        from rab_maker.services.project_service import create_work_item
        create_work_item(
            session, project.id, user1.id,
            category_id=category.id, description='Kolom beton', volume=10.0, unit='m3',
            template_id=template.id
        )

        response = authenticated_client.get(f'/summary/projects/{project.id}/pdf')

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')

    def test_invalid_volume(self, authenticated_client, project, category):
        response = authenticated_client.post(f'/projects/{project.id}/work-items/new', json={
            'category_id': category.id, 'description': 'Galian', 'volume': 0, 'unit': 'm3'
        })

        assert response.status_code == 400


class TestDeleteGuardEndpoints:

    def test_category_in_use_returns_conflict(self, authenticated_client, session, project, category):
        category_id = category.id
        for i in range(3):
            authenticated_client.post(f'/projects/{project.id}/work-items/new', json={
                'category_id': category_id, 'description': f'Item {i}', 'volume': 1, 'unit': 'ls'
            })

        preview = authenticated_client.get(f'/work-categories/{category_id}/delete').get_json()
        assert preview['can_delete'] is False

        response = authenticated_client.post(f'/work-categories/{category_id}/delete')
        assert response.status_code == 409
        assert response.get_json()['dependents'] == 3
        assert session.get(WorkCategory, category_id) is not None

    def test_template_in_use_is_blocked(self, authenticated_client, session, project, category, template):
        template_id = template.id
        authenticated_client.post(f'/projects/{project.id}/work-items/new', json={
            'category_id': category.id, 'description': 'Kolom', 'volume': 1, 'unit': 'm3',
            'template_id': template_id
        })

        response = authenticated_client.post(f'/ahsp/{template_id}/delete')

        assert response.status_code == 409
        assert session.query(WorkItem).count() == 1

    def test_unused_category(self, authenticated_client, session):
        created = authenticated_client.post('/work-categories/new', json={
            'name': 'Pekerjaan Atap', 'display_order': 6
        }).get_json()['category']

        response = authenticated_client.post(f"/work-categories/{created['id']}/delete")

        assert response.status_code == 200
        assert session.get(WorkCategory, created['id']) is None


class TestIdParsing:

    def test_fractional_id_is_rejected(self, authenticated_client, project, category):
        response = authenticated_client.post(f'/projects/{project.id}/work-items/new', json={
            'category_id': category.id + 0.7, 'description': 'Galian', 'volume': 1, 'unit': 'm3'
        })

        assert response.status_code == 400
        assert 'bilangan bulat' in response.get_json()['message']
