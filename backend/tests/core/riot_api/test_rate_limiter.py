from rift_reviewer.core.riot_api.endpoints import parse_rate_limit_header
from rift_reviewer.core.riot_api.rate_limiter import RateLimiter


def test_parse_rate_limit_header():
    assert parse_rate_limit_header("20:1,100:120") == [
        {"requests": 20, "window": 1},
        {"requests": 100, "window": 120},
    ]
    assert parse_rate_limit_header("") == []
    assert parse_rate_limit_header("bad,20:1") == [{"requests": 20, "window": 1}]


class TestRateLimiter:
    def test_headers_update_app_and_method_limits(self):
        limiter = RateLimiter()
        limiter.update_limits(
            {
                "X-App-Rate-Limit": "20:1,100:120",
                "X-App-Rate-Limit-Count": "5:1,99:120",
                "X-Method-Rate-Limit": "2000:10",
                "X-Method-Rate-Limit-Count": "10:10",
            },
            "lol/match/v5/matches/NA1_1",
        )

        assert limiter.app_remaining == 1
        key = limiter._get_endpoint_key("lol/match/v5/matches/NA1_1", "GET")
        assert limiter.method_remaining[key] == 1990

    def test_missing_headers_leave_state_untouched(self):
        limiter = RateLimiter()
        limiter.update_limits({}, "lol/match/v5/matches/NA1_1")

        assert limiter.app_remaining is None
        assert limiter.method_remaining == {}

    async def test_exhausted_limit_past_reset_is_cleared(self):
        limiter = RateLimiter(request_spacing=0)
        limiter.app_remaining = 0
        limiter.app_reset_time = 1.0

        await limiter.wait_if_needed("lol/match/v5/matches/NA1_1")

        assert limiter.app_remaining is None
        assert limiter.app_reset_time is None
