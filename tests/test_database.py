import pytest

from database import DatabaseManager


async def test_requires_connect():
    database = DatabaseManager(":memory:")

    with pytest.raises(RuntimeError):
        await database.get_thread("b", "id")


async def test_connect_is_idempotent(db):
    await db.connect()

    assert db.is_connected
    assert await db.count_threads() == 0


async def test_create_and_get_thread(db):
    created = await db.create_thread("b", "hello", "pw")

    fetched = await db.get_thread("b", created.thread_id)

    assert fetched.text == "hello"
    assert fetched.delete_password == "pw"
    assert fetched.reported is False
    assert fetched.bumped_on == fetched.created_on
    assert fetched.replies == []
    assert await db.get_thread("other", created.thread_id) is None


async def test_add_reply_bumps_thread(db):
    thread = await db.create_thread("b", "hello", "pw")

    reply = await db.add_reply(thread.thread_id, "hi", "rpw")

    fetched = await db.get_thread("b", thread.thread_id)
    assert fetched.bumped_on == reply.created_on
    assert [r.reply_id for r in fetched.replies] == [reply.reply_id]


async def test_replies_keep_insertion_order(db):
    thread = await db.create_thread("b", "hello", "pw")
    for i in range(4):
        await db.add_reply(thread.thread_id, f"reply {i}", "rpw")

    fetched = await db.get_thread("b", thread.thread_id)

    assert [r.text for r in fetched.replies] == ["reply 0", "reply 1", "reply 2", "reply 3"]


async def test_get_threads_by_board_limits(db):
    threads = [await db.create_thread("b", f"thread {i}", "pw") for i in range(4)]
    for i in range(5):
        await db.add_reply(threads[1].thread_id, f"reply {i}", "rpw")

    listed = await db.get_threads_by_board("b", limit=3, replies_limit=2)

    assert [t.thread_id for t in listed] == [threads[1].thread_id, threads[3].thread_id, threads[2].thread_id]
    assert [r.text for r in listed[0].replies] == ["reply 3", "reply 4"]
    assert listed[1].replies == []


async def test_get_threads_by_board_empty(db):
    assert await db.get_threads_by_board("nothing") == []


async def test_report_thread(db):
    thread = await db.create_thread("b", "hello", "pw")

    assert await db.report_thread("b", thread.thread_id)
    assert await db.report_thread("b", thread.thread_id)
    assert not await db.report_thread("other", thread.thread_id)
    assert (await db.get_thread("b", thread.thread_id)).reported is True


async def test_delete_thread_removes_replies(db):
    thread = await db.create_thread("b", "hello", "pw")
    await db.add_reply(thread.thread_id, "hi", "rpw")

    assert await db.delete_thread(thread.thread_id)

    assert await db.get_thread("b", thread.thread_id) is None
    rows = await db.execute_query("SELECT COUNT(*) AS total FROM replies", fetch_one=True)
    assert rows["total"] == 0
    assert not await db.delete_thread(thread.thread_id)


async def test_report_reply_scoped_to_thread(db):
    first = await db.create_thread("b", "one", "pw")
    second = await db.create_thread("b", "two", "pw")
    reply = await db.add_reply(first.thread_id, "hi", "rpw")

    assert not await db.report_reply(second.thread_id, reply.reply_id)
    assert await db.report_reply(first.thread_id, reply.reply_id)
    assert (await db.get_thread("b", first.thread_id)).replies[0].reported is True


async def test_redact_reply_keeps_identity(db):
    thread = await db.create_thread("b", "hello", "pw")
    reply = await db.add_reply(thread.thread_id, "hi", "rpw")

    assert await db.redact_reply(thread.thread_id, reply.reply_id)

    redacted = (await db.get_thread("b", thread.thread_id)).replies[0]
    assert redacted.text == "[deleted]"
    assert redacted.deleted
    assert redacted.reply_id == reply.reply_id
    assert redacted.created_on == reply.created_on


async def test_failed_transaction_rolls_back(db):
    thread = await db.create_thread("b", "hello", "pw")

    with pytest.raises(ValueError):
        async with db.transaction() as conn:
            await conn.execute("UPDATE threads SET text = 'changed' WHERE thread_id = ?", (thread.thread_id,))
            raise ValueError("boom")

    assert (await db.get_thread("b", thread.thread_id)).text == "hello"
