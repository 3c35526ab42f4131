from __future__ import annotations

from pbt_spies.calls import CallLog, Spied


class TestCallLog:
    def test_appends_in_order(self) -> None:
        log: CallLog[int] = CallLog()
        log.append(Spied((1,), 10))
        log.append(Spied((2, 3), 20, {"flag": True}))

        assert len(log) == 2
        assert log[0] == Spied((1,), 10)
        assert log[-1].kwargs == {"flag": True}
        assert log.args == [(1,), (2, 3)]
        assert log.results == [10, 20]

    def test_compares_with_sequences(self) -> None:
        log = CallLog([Spied(("a",), 1)])
        assert log == [Spied(("a",), 1)]
        assert log == CallLog([Spied(("a",), 1)])
        assert log != []
        assert log != "a"

    def test_clear_is_idempotent(self) -> None:
        log = CallLog([Spied((), None)])
        log.clear()
        log.clear()
        assert log == []
        assert len(log) == 0

    def test_slicing_returns_list(self) -> None:
        log = CallLog([Spied((i,), i) for i in range(4)])
        assert log[1:3] == [Spied((1,), 1), Spied((2,), 2)]
