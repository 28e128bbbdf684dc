"""Tests for the session and candidate stores."""

from backend.db import CandidateProfile, SearchSession
from backend.services.candidates import candidate_card, get_candidates, upsert_candidate
from backend.services.sessions import append_turn, create_session, list_turns, make_title


class TestSessions:
    def test_title_is_truncated(self) -> None:
        assert make_title("short query") == "short query"
        assert make_title("x" * 60) == "x" * 50 + "..."
        assert make_title("x" * 50) == "x" * 50

    def test_create_session_seeds_first_turn(self, db, user) -> None:
        session = create_session(db, user, "Find data engineers in Berlin", jd_id="jd-7")

        assert session.title == "Find data engineers in Berlin"
        assert session.initial_query == "Find data engineers in Berlin"
        assert session.attached_jd_id == "jd-7"
        assert session.schema_version == 1
        assert session.tool_results is None
        assert [(t.role, t.content) for t in list_turns(db, session.id)] == [
            ("user", "Find data engineers in Berlin")
        ]

    def test_turns_keep_append_order(self, db, user) -> None:
        session = create_session(db, user, "first")
        append_turn(db, session.id, "assistant", "second")
        append_turn(db, session.id, "user", "third")
        append_turn(db, session.id, "assistant", "fourth")

        assert [t.content for t in list_turns(db, session.id)] == ["first", "second", "third", "fourth"]

    def test_append_turn_bumps_updated_at(self, db, user) -> None:
        session = create_session(db, user, "first")
        created = session.updated_at

        append_turn(db, session.id, "assistant", "reply")

        db.expire_all()
        assert db.get(SearchSession, session.id).updated_at >= created


class TestCandidates:
    def test_upsert_is_idempotent(self, db, make_profile) -> None:
        assert upsert_candidate(db, "jane-doe", make_profile()) is True
        assert upsert_candidate(db, "jane-doe", make_profile(job_title="Staff Engineer")) is False

        rows = db.query(CandidateProfile).all()
        assert len(rows) == 1
        assert rows[0].raw_data["job_title"] == "Staff Engineer"

    def test_get_candidates_by_ids(self, db, make_profile) -> None:
        for public_id in ("a", "b", "c"):
            upsert_candidate(db, public_id, make_profile(public_id))

        found = get_candidates(db, ["a", "c", "missing"])

        assert sorted(c.public_id for c in found) == ["a", "c"]

    def test_card(self, db, make_profile) -> None:
        upsert_candidate(db, "jane-doe", make_profile())
        card = candidate_card(get_candidates(db, ["jane-doe"])[0])

        assert card["id"] == "jane-doe"
        assert card["name"] == "Jane Doe"
        assert card["company"] == "Acme"

    def test_card_defaults(self, db) -> None:
        upsert_candidate(db, "sparse", {"public_id": "sparse"})
        card = candidate_card(get_candidates(db, ["sparse"])[0])

        assert card["title"] == "No title available"
        assert card["company"] == "No company"
        assert card["location"] == "Location not specified"
