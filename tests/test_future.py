import asyncio
import concurrent.futures
import threading

import pytest

import arangovst
from arangovst.future import Future, shield


def test_basics():

    future = Future()
    assert future.done() == False

    assert future.set_result(44) == True
    assert future.done() == True
    assert future.result() == 44
    assert future.exception() is None

    # Write once.

    assert future.set_result(45) == False
    assert future.set_exception(RuntimeError('late')) == False
    assert future.result() == 44


def test_exception():

    future = Future.failed(arangovst.RequestTimeout('too slow'))

    assert future.done() == True
    assert isinstance(future.exception(), arangovst.RequestTimeout)

    with pytest.raises(arangovst.RequestTimeout):
        future.result()


def test_result_timeout():

    future = Future()

    with pytest.raises(concurrent.futures.TimeoutError):
        future.result(0.01)


def test_cancel():

    test_cancel.cancelled = 0

    def canceller():
        test_cancel.cancelled += 1

    future = Future(canceller=canceller)
    assert future.cancel() == True
    assert future.cancelled() == True
    assert test_cancel.cancelled == 1

    with pytest.raises(arangovst.Cancelled):
        future.result()

    # Cancelling again, or after completion, does nothing.

    assert future.cancel() == False
    assert test_cancel.cancelled == 1

    completed = Future.completed(1)
    assert completed.cancel() == False
    assert completed.cancelled() == False


def test_callbacks():

    future = Future()
    seen = list()

    future.add_done_callback(lambda done: seen.append(done.result()))
    assert seen == []

    future.set_result('first')
    assert seen == ['first']

    # Already complete: invoked immediately.

    future.add_done_callback(lambda done: seen.append('second'))
    assert seen == ['first', 'second']


def test_then():

    future = Future()
    derived = future.then(lambda value: value * 2)

    future.set_result(21)
    assert derived.result(1) == 42

    failed = Future.failed(ValueError('bad')).then(lambda value: value * 2)
    assert isinstance(failed.exception(), ValueError)

    raising = Future.completed(1).then(lambda value: 1 / 0)
    assert isinstance(raising.exception(), ZeroDivisionError)


def test_then_future():
    """ A function returning a future is followed, not nested.
    """

    inner = Future()
    derived = Future.completed(1).then(lambda value: inner)

    assert derived.done() == False
    inner.set_result('inner')
    assert derived.result(1) == 'inner'


def test_then_cancel():

    source = Future()
    derived = source.then(lambda value: value)

    derived.cancel()
    assert source.cancelled() == True


def test_recover():

    recovered = Future.failed(KeyError('missing')).recover(lambda exception: 'default')
    assert recovered.result() == 'default'

    passed = Future.completed('value').recover(lambda exception: 'default')
    assert passed.result() == 'value'

    def reraise(exception):
        raise exception

    still = Future.failed(KeyError('missing')).recover(reraise)
    assert isinstance(still.exception(), KeyError)


def test_shield():

    source = Future()
    follower = shield(source)

    follower.cancel()
    assert source.done() == False

    other = shield(source)
    source.set_result(3)
    assert other.result() == 3


def test_threads():

    future = Future()

    def produce():
        future.set_result('produced')

    thread = threading.Thread(target=produce)
    thread.start()

    assert future.result(1) == 'produced'
    thread.join()


def test_await():

    future = Future()

    async def consume():
        threading.Timer(0.01, future.set_result, ('awaited',)).start()
        return await future

    assert asyncio.run(consume()) == 'awaited'


def test_await_failure():

    async def consume():
        return await Future.failed(arangovst.RequestTimeout('late'))

    with pytest.raises(arangovst.RequestTimeout):
        asyncio.run(consume())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
