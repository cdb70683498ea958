import asyncio
from unittest.mock import Mock

import pytest

from core.captcha import CaptchaSolver
from core.errors import CaptchaError, CaptchaTimeout
from tests.conftest import FakeResponse


def solver_with(settings, responses):
    session = Mock()
    session.get.side_effect = responses
    return CaptchaSolver(settings, session), session


def test_rejected_submission_returns_none(settings):
    solver, session = solver_with(settings, [FakeResponse(200, {"status": 0, "request": "ERROR_WRONG_USER_KEY"})])

    assert asyncio.run(solver.solve()) is None
    assert session.get.call_count == 1


def test_submission_params(settings):
    solver, session = solver_with(settings, [
        FakeResponse(200, {"status": 1, "request": "job-1"}),
        FakeResponse(200, {"status": 1, "request": "tok"}),
    ])

    asyncio.run(solver.solve())

    url, = session.get.call_args_list[0].args
    params = session.get.call_args_list[0].kwargs["params"]
    assert url == "https://captcha.example.test/in.php"
    assert params["method"] == "turnstile"
    assert params["sitekey"] == settings.turnstile_sitekey
    assert params["pageurl"] == settings.page_url
    assert params["json"] == 1
    assert session.get.call_args_list[1].args[0] == "https://captcha.example.test/res.php"
    assert session.get.call_args_list[1].kwargs["params"]["id"] == "job-1"


def test_tolerates_pending_before_success(settings):
    pending = [FakeResponse(200, {"status": 0, "request": "CAPCHA_NOT_READY"}) for _ in range(4)]
    solver, session = solver_with(settings, [FakeResponse(200, {"status": 1, "request": "job-1"})]
                                  + pending + [FakeResponse(200, {"status": 1, "request": "turnstile-token"})])

    assert asyncio.run(solver.solve()) == "turnstile-token"
    assert session.get.call_count == 6


def test_times_out_after_max_attempts(settings):
    pending = [FakeResponse(200, {"status": 0, "request": "CAPCHA_NOT_READY"}) for _ in range(settings.captcha_max_attempts)]
    solver, _ = solver_with(settings, [FakeResponse(200, {"status": 1, "request": "job-1"})] + pending)

    with pytest.raises(CaptchaTimeout) as exc:
        asyncio.run(solver.solve())
    assert exc.value.job_id == "job-1"
    assert exc.value.attempts == settings.captcha_max_attempts


def test_never_returns_token_without_success_status(settings):
    solver, _ = solver_with(settings, [
        FakeResponse(200, {"status": 1, "request": "job-1"}),
        FakeResponse(200, {"status": 0, "request": "looks-like-a-token"}),
        FakeResponse(200, {"status": 0, "request": "ERROR_CAPTCHA_UNSOLVABLE"}),
    ])

    with pytest.raises(CaptchaError):
        asyncio.run(solver.solve())


def test_non_json_answer(settings):
    solver, _ = solver_with(settings, [FakeResponse(502, None)])

    with pytest.raises(CaptchaError):
        asyncio.run(solver.solve())


def test_submit_success_without_job_id(settings):
    solver, _ = solver_with(settings, [FakeResponse(200, {"status": 1})])

    with pytest.raises(CaptchaError):
        asyncio.run(solver.solve())


def test_poll_success_without_token(settings):
    solver, _ = solver_with(settings, [
        FakeResponse(200, {"status": 1, "request": "job-1"}),
        FakeResponse(200, {"status": 1}),
    ])

    with pytest.raises(CaptchaError):
        asyncio.run(solver.solve())
