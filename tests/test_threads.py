from replies import Reply, passwords_match
from threads import Thread


def make_thread(reply_count=0):
    thread = Thread("t1", "b", "hello", "pw", created_on=100.0)
    for i in range(reply_count):
        thread.replies.append(Reply(f"r{i}", "t1", f"reply {i}", "rpw", created_on=101.0 + i))
    return thread


def test_new_thread_is_bumped_at_creation():
    thread = make_thread()

    assert thread.bumped_on == thread.created_on
    assert thread.reported is False


def test_recent_replies_returns_last_in_order():
    thread = make_thread(5)

    assert [r.reply_id for r in thread.recent_replies(3)] == ["r2", "r3", "r4"]


def test_recent_replies_with_few_replies():
    thread = make_thread(2)

    assert [r.reply_id for r in thread.recent_replies(3)] == ["r0", "r1"]
    assert thread.recent_replies(0) == []


def test_find_reply():
    thread = make_thread(3)

    assert thread.find_reply("r1").text == "reply 1"
    assert thread.find_reply("missing") is None


def test_check_password_is_exact():
    thread = make_thread()
    reply = Reply("r", "t1", "text", "Pässword")

    assert thread.check_password("pw")
    assert not thread.check_password("PW")
    assert not thread.check_password("pw ")
    assert reply.check_password("Pässword")
    assert not reply.check_password("Password")


def test_unpaired_surrogate_never_matches():
    assert not passwords_match("pw", "\ud800")
