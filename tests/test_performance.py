"""Tests for performance metrics and report requests."""

from datetime import date

import pytest
import pytest_asyncio

from productivity.models import Target
from productivity.services.performance import GroupBy, period_start

pytestmark = pytest.mark.asyncio

RANGE = {"startDate": "2026-03-01", "endDate": "2026-03-31"}


class TestPeriodStart:
    @pytest.mark.parametrize(
        "day,group_by,expected",
        [
            (date(2026, 3, 4), GroupBy.DAY, date(2026, 3, 4)),
            # Wednesday -> Monday of the same ISO week
            (date(2026, 3, 4), GroupBy.WEEK, date(2026, 3, 2)),
            # Sunday still belongs to the week that started on Monday
            (date(2026, 3, 8), GroupBy.WEEK, date(2026, 3, 2)),
            (date(2026, 3, 2), GroupBy.WEEK, date(2026, 3, 2)),
            # Weeks may straddle a year boundary
            (date(2026, 1, 1), GroupBy.WEEK, date(2025, 12, 29)),
            (date(2026, 3, 31), GroupBy.MONTH, date(2026, 3, 1)),
        ],
    )
    async def test_period_start(self, day, group_by, expected):
        assert period_start(day, group_by) == expected


@pytest_asyncio.fixture
async def team(user_factory, daily_log_factory):
    """Two operators with logs on 2026-03-02 (Mon) and 2026-03-09 (next Mon)."""
    first = await user_factory(username="operator1", full_name="Oscar One")
    second = await user_factory(username="operator2", full_name="Olga Two")
    await daily_log_factory(first.id, date(2026, 3, 2), binning_count=60, picking_count=40)
    await daily_log_factory(second.id, date(2026, 3, 2), binning_count=20, picking_count=80)
    await daily_log_factory(first.id, date(2026, 3, 3), is_present=False)
    await daily_log_factory(first.id, date(2026, 3, 9), binning_count=50, picking_count=0)
    return first, second


class TestMetrics:
    async def test_grouped_by_day(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics",
            params=RANGE,
            headers=auth_headers(first),
        )

        assert response.status_code == 200
        periods = response.json()["data"]
        assert [p["period"] for p in periods] == ["2026-03-02", "2026-03-03", "2026-03-09"]
        day_one = periods[0]
        assert day_one["totalItems"] == 200
        assert day_one["activeOperators"] == 2
        assert day_one["averageItemsPerOperator"] == pytest.approx(100.0)
        assert day_one["binningPercentage"] == pytest.approx(40.0)
        assert day_one["pickingPercentage"] == pytest.approx(60.0)
        assert day_one["attendanceRate"] == pytest.approx(100.0)

    async def test_zero_items_gives_zero_percentages(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics",
            params={"startDate": "2026-03-03", "endDate": "2026-03-03"},
            headers=auth_headers(first),
        )

        (period,) = response.json()["data"]
        assert period["totalItems"] == 0
        assert period["binningPercentage"] == 0
        assert period["pickingPercentage"] == 0
        assert period["attendanceRate"] == 0

    async def test_grouped_by_week(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics",
            params={**RANGE, "groupBy": "week"},
            headers=auth_headers(first),
        )

        periods = response.json()["data"]
        assert [p["period"] for p in periods] == ["2026-03-02", "2026-03-09"]
        assert periods[0]["totalItems"] == 200
        assert periods[0]["attendanceRate"] == pytest.approx(200 / 3)

    async def test_grouped_by_month_for_one_user(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics",
            params={**RANGE, "groupBy": "month", "userId": first.id},
            headers=auth_headers(first),
        )

        (period,) = response.json()["data"]
        assert period["period"] == "2026-03-01"
        assert period["totalItems"] == 150
        assert period["activeOperators"] == 1

    async def test_unknown_group_by_rejected(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics",
            params={**RANGE, "groupBy": "year"},
            headers=auth_headers(first),
        )
        assert response.status_code == 400

    async def test_requires_authentication(self, async_client, roles):
        response = await async_client.get("/api/performance/performance-metrics", params=RANGE)
        assert response.status_code == 401


class TestOperatorPerformance:
    async def test_operator_summary(self, async_client, auth_headers, team, db_session):
        first, _ = team
        db_session.add(Target(daily_target=100, effective_from=date(2020, 1, 1)))
        await db_session.commit()

        response = await async_client.get(
            f"/api/performance/performance-metrics/operator/{first.id}",
            params=RANGE,
            headers=auth_headers(first),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["totalItems"] == 150
        assert data["averageItemsPerDay"] == pytest.approx(50.0)
        assert data["attendanceRate"] == pytest.approx(200 / 3)
        assert data["targetAchievement"] == pytest.approx(50.0)
        assert [day["date"] for day in data["dailyBreakdown"]] == [
            "2026-03-02",
            "2026-03-03",
            "2026-03-09",
        ]
        assert data["dailyBreakdown"][1]["isPresent"] is False

    async def test_target_achievement_null_without_target(
        self, async_client, auth_headers, team
    ):
        first, _ = team

        response = await async_client.get(
            f"/api/performance/performance-metrics/operator/{first.id}",
            params=RANGE,
            headers=auth_headers(first),
        )
        assert response.json()["data"]["targetAchievement"] is None

    async def test_expired_target_ignored(self, async_client, auth_headers, team, db_session):
        first, _ = team
        db_session.add(
            Target(daily_target=100, effective_from=date(2020, 1, 1), effective_to=date(2021, 1, 1))
        )
        await db_session.commit()

        response = await async_client.get(
            f"/api/performance/performance-metrics/operator/{first.id}",
            params=RANGE,
            headers=auth_headers(first),
        )
        assert response.json()["data"]["targetAchievement"] is None

    async def test_no_data_is_404(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            f"/api/performance/performance-metrics/operator/{first.id}",
            params={"startDate": "2025-01-01", "endDate": "2025-01-31"},
            headers=auth_headers(first),
        )

        assert response.status_code == 404
        assert response.json()["message"] == "No performance data found for this operator"


class TestTeamPerformance:
    async def test_team_breakdown_per_operator(self, async_client, auth_headers, team):
        first, second = team

        response = await async_client.get(
            "/api/performance/performance-metrics/team",
            params={**RANGE, "groupBy": "week"},
            headers=auth_headers(first),
        )

        assert response.status_code == 200
        week_one = response.json()["data"][0]
        assert week_one["targetAchievement"] is None
        by_user = {op["userId"]: op for op in week_one["operatorPerformance"]}
        assert set(by_user) == {first.id, second.id}
        assert by_user[first.id]["fullName"] == "Oscar One"
        assert by_user[first.id]["totalItems"] == 100
        assert by_user[first.id]["averageItemsPerDay"] == pytest.approx(50.0)
        assert by_user[first.id]["attendanceRate"] == pytest.approx(50.0)
        assert by_user[second.id]["attendanceRate"] == pytest.approx(100.0)

    async def test_empty_range_returns_empty_list(self, async_client, auth_headers, team):
        first, _ = team

        response = await async_client.get(
            "/api/performance/performance-metrics/team",
            params={"startDate": "2025-01-01", "endDate": "2025-01-31"},
            headers=auth_headers(first),
        )
        assert response.json()["data"] == []


class TestReports:
    async def test_request_and_fetch_report(self, async_client, user_factory, auth_headers):
        viewer = await user_factory(username="viewer1", role="viewer")
        headers = auth_headers(viewer)

        response = await async_client.post(
            "/api/performance/reports",
            json={
                **RANGE,
                "reportType": "weekly",
                "exportFormat": "pdf",
                "emailTo": "boss@example.com",
            },
            headers=headers,
        )

        assert response.status_code == 201
        report = response.json()["data"]
        assert report["status"] == "pending"
        assert report["userId"] == viewer.id

        fetched = await async_client.get(
            f"/api/performance/reports/{report['id']}", headers=headers
        )
        assert fetched.status_code == 200
        assert fetched.json()["data"]["reportType"] == "weekly"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"reportType": "yearly"},
            {"exportFormat": "csv"},
            {"emailTo": "not-an-email"},
            {"startDate": "2026-04-01"},
        ],
    )
    async def test_invalid_report_request(
        self, async_client, user_factory, auth_headers, overrides
    ):
        viewer = await user_factory(username="viewer1", role="viewer")
        payload = {**RANGE, "reportType": "daily", "exportFormat": "excel", **overrides}

        response = await async_client.post(
            "/api/performance/reports", json=payload, headers=auth_headers(viewer)
        )
        assert response.status_code == 400

    async def test_missing_report(self, async_client, user_factory, auth_headers):
        viewer = await user_factory(username="viewer1", role="viewer")
        response = await async_client.get(
            "/api/performance/reports/9999", headers=auth_headers(viewer)
        )
        assert response.status_code == 404
