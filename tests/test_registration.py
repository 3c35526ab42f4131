"""A user-registration service tested against a randomized, spied client."""

from __future__ import annotations

import asyncio

from hypothesis import given
from hypothesis import strategies as st

from pbt_spies import (
    Fields,
    SpyingStrategy,
    Weighted,
    is_failure,
    is_success,
    one_of_weighted,
    record,
    spy_async_fn,
    spy_fn,
    to_strategy,
)
from pbt_spies.result import Success, attempt
from tests.example import VALIDATION_ERRORS, Refused, Registered, Response, User, register_user

users = st.builds(
    User,
    username=st.text(min_size=3),
    email=st.emails(),
    password=st.text(min_size=3),
)


def arb_user_client() -> SpyingStrategy[Fields, Fields]:
    return record(
        {
            "check_username": spy_async_fn(
                on_success=st.builds(Response, data=st.booleans(), status=st.just(200)),
                on_failure=st.builds(Response, data=st.just(False), status=st.just(500)),
                like=lambda username: None,
            ),
            "create_user": spy_async_fn(
                on_success=st.builds(Response, data=st.integers(min_value=1), status=st.just(201)),
                on_failure=st.builds(Response, data=st.none(), status=st.just(400)),
                like=lambda user: None,
            ),
            "validate_password": spy_fn(
                one_of_weighted(
                    Weighted(4, st.none()),
                    Weighted(1, st.sampled_from(VALIDATION_ERRORS)),
                ),
                like=lambda password: None,
            ),
        }
    )


class TestRegisterUser:
    @given(users, to_strategy(arb_user_client()))
    def test_outcome_is_explained_by_the_client_calls(self, user: User, drawn) -> None:
        log, client = drawn
        outcome = asyncio.run(attempt(register_user(client, user)))

        # every call was made with the right input
        if log.check_username:
            assert log.check_username.args == [(user.username,)]
        if log.validate_password:
            assert log.validate_password.args == [(user.password,)]
        if log.create_user:
            assert log.create_user.args == [(user,)]

        if is_success(outcome) and isinstance(outcome.success, Registered):
            # every call responded successfully
            assert log.check_username[0].result == Success(Response(True, 200))
            assert log.validate_password[0].result is None
            assert log.create_user[0].result == Success(Response(outcome.success.user_id, 201))

        elif is_success(outcome) and isinstance(outcome.success, Refused):
            # a refusal is a translation of a client answer
            message = outcome.success.message
            if message == "Username taken":
                assert log.check_username[0].result == Success(Response(False, 200))
                assert not log.validate_password
            else:
                assert message in VALIDATION_ERRORS
                assert log.validate_password[0].result == message
            assert not log.create_user

        else:
            # a failure is forwarded from the client call that failed
            assert is_failure(outcome)
            failed = [
                calls[0].result
                for calls in (log.check_username, log.create_user)
                if calls and is_failure(calls[0].result)
            ]
            assert failed == [outcome]

    @given(users, to_strategy(arb_user_client()))
    def test_user_is_created_at_most_once(self, user: User, drawn) -> None:
        log, client = drawn
        asyncio.run(attempt(register_user(client, user)))
        assert len(log.check_username) == 1
        assert len(log.create_user) <= 1
