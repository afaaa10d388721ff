"""HTTP contract of /api/showtime, /api/audit and the platform endpoints"""

import pytest


@pytest.mark.api
class TestShowtimeEndpoints:
    @pytest.mark.asyncio
    async def test_create_showtime(self, api_client, seeded) -> None:
        response = await api_client.post(
            '/api/showtime',
            json={
                'movie_id': seeded.movie.id,
                'hall_id': seeded.hall.id,
                'show_date': '2025-01-11',
                'start_time': '19:00:00',
                'end_time': '21:00:00',
                'price': 300,
            },
        )

        assert response.status_code == 201
        body = response.json()
        assert body['id'] > 0
        assert body['show_date'] == '2025-01-11'
        assert body['price'] == 300

    @pytest.mark.asyncio
    async def test_overlapping_showtime_is_409(self, api_client, seeded) -> None:
        response = await api_client.post(
            '/api/showtime',
            json={
                'movie_id': seeded.movie.id,
                'hall_id': seeded.hall.id,
                'show_date': seeded.showtime.show_date.isoformat(),
                'start_time': '20:00:00',
                'end_time': '22:00:00',
                'price': 300,
            },
        )

        assert response.status_code == 409
        assert response.json()['error'] == 'Conflict'

    @pytest.mark.asyncio
    async def test_availability_lists_every_seat(self, api_client, seeded) -> None:
        a1 = seeded.seats['A1']
        await api_client.post(
            '/api/booking',
            json={'showtime_id': seeded.showtime_id, 'seat_ids': [a1]},
            headers={'X-User-Id': '1'},
        )

        response = await api_client.get(f'/api/showtime/{seeded.showtime_id}/availability')

        assert response.status_code == 200
        seats = response.json()
        assert len(seats) == 10
        assert [s['seat_id'] for s in seats if not s['available']] == [a1]
        assert {s['category'] for s in seats if s['row_label'] == 'B'} == {'premium'}

    @pytest.mark.asyncio
    async def test_availability_of_unknown_showtime_is_404(self, api_client) -> None:
        response = await api_client.get('/api/showtime/999/availability')

        assert response.status_code == 404


@pytest.mark.api
class TestAuditEndpoints:
    @pytest.mark.asyncio
    async def test_audit_of_healthy_ledger(self, api_client, seeded) -> None:
        response = await api_client.get('/api/audit')

        assert response.status_code == 200
        assert response.json() == {'has_fatal': False, 'findings': []}

    @pytest.mark.asyncio
    async def test_reconcile_cancels_abandoned_pending(
        self, api_client, uow_factory, seeded
    ) -> None:
        async with uow_factory() as uow:
            abandoned = await uow.booking_ledger.create_pending_booking(
                user_id=1, showtime_id=seeded.showtime_id
            )
            await uow.commit()

        response = await api_client.post('/api/audit/reconcile', json={'older_than_seconds': 0})

        assert response.status_code == 200
        assert response.json() == {'cancelled_booking_ids': [abandoned.id]}

    @pytest.mark.asyncio
    async def test_reconcile_with_default_timeout(self, api_client, seeded) -> None:
        response = await api_client.post('/api/audit/reconcile', json={})

        assert response.status_code == 200
        assert response.json() == {'cancelled_booking_ids': []}


@pytest.mark.api
class TestPlatformEndpoints:
    @pytest.mark.asyncio
    async def test_health(self, api_client) -> None:
        response = await api_client.get('/health')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    @pytest.mark.asyncio
    async def test_metrics_exposes_booking_counters(self, api_client) -> None:
        response = await api_client.get('/metrics')

        assert response.status_code == 200
        assert 'seat_reservation_requests_total' in response.text
