"""
API Contract Test Module

Exercises the FastAPI routers through TestClient with the service layer
patched, checking status codes, error mapping and response envelopes.
The lifespan is not entered, so no database pool is created.
"""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from contractor_engine.core.dependencies import get_settings_dependency
from contractor_engine.core.exceptions import NotFound, UpstreamUnavailable
from contractor_engine.main import app
from contractor_engine.models.schemas import (
    ContractorMatch,
    MatchingResponse,
    PriceRange,
    RecordOutcomeResult,
    ServicePattern,
)
from contractor_engine.tests.conftest import make_pattern_row


MATCHING_API = 'contractor_engine.api.matching'
LEARNING_API = 'contractor_engine.api.learning'

OUTCOME_BODY = {
    'event_id': 'evt_2f9a',
    'event_type': 'wedding',
    'attendee_count': 120,
    'budget': 25000,
    'services_used': ['catering', 'photography', 'venue', 'florist'],
    'success_metrics': {
        'overall_rating': 4.8,
        'budget_variance': 2.0,
        'timeline_adherence': 0.95,
    },
}


@pytest.fixture
def client(test_settings):
    app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestMatchingEndpoint:
    """POST /matching/contractors"""

    def test_returns_ranked_matches(self, client):
        response_model = MatchingResponse(
            matches=[
                ContractorMatch(
                    providerId='p1',
                    providerName='Lens & Light',
                    serviceCategory='photography',
                    matchScore=0.97,
                    estimatedPrice=PriceRange(min=1800, max=4200),
                    rating=4.7,
                    reviewCount=86,
                )
            ],
            total=1,
            categories=['photography'],
        )

        with patch(f'{MATCHING_API}.find_matches', new=AsyncMock(return_value=response_model)):
            response = client.post(
                '/matching/contractors',
                json={'requirements': [{'category': 'photography', 'priority': 'high'}]},
            )

        assert response.status_code == 200
        body = response.json()
        assert body['total'] == 1
        assert body['matches'][0]['providerId'] == 'p1'
        assert body['matches'][0]['estimatedPrice'] == {'min': 1800.0, 'max': 4200.0}

    def test_empty_requirements_is_bad_request(self, client):
        response = client.post('/matching/contractors', json={'requirements': []})

        assert response.status_code == 400

    def test_catalog_outage_is_service_unavailable(self, client):
        with patch(
            f'{MATCHING_API}.find_matches',
            new=AsyncMock(side_effect=UpstreamUnavailable('catalog down')),
        ):
            response = client.post('/matching/contractors', json={'requirements': [{'category': 'venue'}]})

        assert response.status_code == 503
        assert response.json()['detail'] == 'catalog down'


class TestOutcomeEndpoint:
    """POST /learning/outcomes"""

    def test_report_is_accepted(self, client, test_settings):
        record = AsyncMock(return_value=RecordOutcomeResult(pattern_updated=True, insights_emitted=[]))

        with patch(f'{LEARNING_API}.store_outcome_report', new=AsyncMock(return_value='1')), \
             patch(f'{LEARNING_API}.record_outcome', new=record):
            response = client.post('/learning/outcomes', json=OUTCOME_BODY)

        assert response.status_code == 202
        assert response.json() == {
            'accepted': True,
            'event_id': 'evt_2f9a',
            'pattern_updated': True,
            'insights_emitted': [],
        }
        assert record.await_args.args[1] is test_settings

    def test_learning_failure_still_accepts(self, client):
        record = AsyncMock(return_value=RecordOutcomeResult(pattern_updated=False))

        with patch(f'{LEARNING_API}.store_outcome_report', new=AsyncMock(return_value='1')), \
             patch(f'{LEARNING_API}.record_outcome', new=record):
            response = client.post('/learning/outcomes', json=OUTCOME_BODY)

        assert response.status_code == 202
        assert response.json()['pattern_updated'] is False

    def test_raw_store_failure_is_service_unavailable(self, client):
        record = AsyncMock()

        with patch(
            f'{LEARNING_API}.store_outcome_report',
            new=AsyncMock(side_effect=UpstreamUnavailable('report store down')),
        ), patch(f'{LEARNING_API}.record_outcome', new=record):
            response = client.post('/learning/outcomes', json=OUTCOME_BODY)

        assert response.status_code == 503
        record.assert_not_awaited()

    def test_empty_services_is_rejected(self, client):
        body = dict(OUTCOME_BODY, services_used=[])

        response = client.post('/learning/outcomes', json=body)

        assert response.status_code == 422

    def test_rating_out_of_range_is_rejected(self, client):
        body = dict(OUTCOME_BODY, success_metrics={
            'overall_rating': 6,
            'budget_variance': 0,
            'timeline_adherence': 1,
        })

        response = client.post('/learning/outcomes', json=body)

        assert response.status_code == 422


class TestLearningReadEndpoints:
    """GET /learning/patterns, /learning/insights, /learning/summary"""

    def test_list_patterns(self, client):
        patterns = [ServicePattern.from_record(make_pattern_row())]

        with patch(f'{LEARNING_API}.query_patterns', new=AsyncMock(return_value=patterns)) as query:
            response = client.get('/learning/patterns', params={'event_type': 'wedding', 'since_days': 7})

        assert response.status_code == 200
        assert response.json()[0]['service_combination'] == 'catering,venue'
        assert query.await_args.args[:2] == ('wedding', 7)

    def test_pattern_lookup_not_found(self, client):
        with patch(
            f'{LEARNING_API}.get_pattern',
            new=AsyncMock(side_effect=NotFound('no pattern')),
        ) as lookup:
            response = client.get(
                '/learning/patterns/wedding', params=[('services', 'venue'), ('services', 'catering')],
            )

        assert response.status_code == 404
        assert lookup.await_args.args == ('wedding', ['venue', 'catering'])

    def test_list_insights_store_outage(self, client):
        with patch(
            f'{LEARNING_API}.query_insights',
            new=AsyncMock(side_effect=UpstreamUnavailable('insight log down')),
        ):
            response = client.get('/learning/insights')

        assert response.status_code == 503

    def test_summary_rejects_zero_day_window(self, client):
        response = client.get('/learning/summary', params={'since_days': 0})

        assert response.status_code == 400

    def test_patterns_reject_oversized_window(self, client):
        response = client.get('/learning/patterns', params={'since_days': 1000000})

        assert response.status_code == 400
        assert 'at most' in response.json()['detail']


class TestServiceEndpoints:
    """GET /health and GET /"""

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.json() == {'status': 'healthy'}

    def test_root(self, client):
        body = client.get('/').json()

        assert body['name'] == 'Contractor Engine API'
        assert body['docs'] == '/docs'
