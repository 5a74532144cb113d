import threading

import pytest

from booga.base import (
    CONTEXT_STACK_MAX,
    Context,
    ContextStack,
    align_next,
    align_previous,
    next_power_of_two,
)


def test_next_power_of_two_of_zero_is_one():
    assert next_power_of_two(0) == 1


@pytest.mark.parametrize("x", [1, 2, 3, 5, 7, 8, 9, 1000, 4096, 4097, 2**40 + 3])
def test_next_power_of_two_invariants(x):
    result = next_power_of_two(x)
    assert result & (result - 1) == 0
    assert result >= x
    assert result < 2 * x or x == 1


def test_next_power_of_two_keeps_powers():
    for shift in range(0, 63):
        assert next_power_of_two(1 << shift) == 1 << shift


def test_next_power_of_two_rejects_negative():
    with pytest.raises(ValueError):
        next_power_of_two(-1)


@pytest.mark.parametrize("alignment", [1, 2, 4, 8, 16, 64])
@pytest.mark.parametrize("x", [0, 1, 7, 8, 9, 100, 1023])
def test_align_next_and_previous(x, alignment):
    up = align_next(x, alignment)
    down = align_previous(x, alignment)
    assert up % alignment == 0
    assert down % alignment == 0
    assert down <= x <= up
    assert up - x < alignment
    assert x - down < alignment


def test_align_rejects_non_power_of_two():
    with pytest.raises(ValueError):
        align_next(10, 3)
    with pytest.raises(ValueError):
        align_previous(10, 0)


def test_push_and_pop_round_trip():
    stack = ContextStack()
    original = stack.current()
    pushed = Context(thread_id=42, extra={"monkee": 1})
    stack.push(pushed)
    assert stack.current() is pushed
    assert len(stack) == 1
    assert stack.pop() is pushed
    assert stack.current() is original
    assert len(stack) == 0


def test_pop_empty_raises():
    stack = ContextStack()
    with pytest.raises(IndexError):
        stack.pop()


def test_push_overflow_raises():
    stack = ContextStack()
    for _ in range(CONTEXT_STACK_MAX):
        stack.push(Context())
    with pytest.raises(OverflowError):
        stack.push(Context())


def test_pushed_restores_after_exception():
    stack = ContextStack()
    original = stack.current()
    inner = Context(extra="inner")
    with pytest.raises(KeyError):
        with stack.pushed(inner) as ctx:
            assert stack.current() is ctx
            raise KeyError("boom")
    assert stack.current() is original


def test_default_context_carries_thread_id():
    stack = ContextStack()
    assert stack.current().thread_id == threading.get_ident()


def test_contexts_are_per_thread():
    stack = ContextStack()
    stack.push(Context(extra="main"))
    seen = {}

    def worker():
        seen["depth"] = len(stack)
        seen["extra"] = stack.current().extra

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()
    assert seen["depth"] == 0
    assert seen["extra"] is None
    assert stack.current().extra == "main"