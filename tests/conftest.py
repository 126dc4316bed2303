import io
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from academy import create_app
from academy.extensions import db as _db
from academy.auth import issue_token
from academy.models import Assessment, Department, Employee, Scenario

RUBRIC = {
    "generic": ["Clarity", "Accuracy", "Critical Thinking"],
    "department": ["Risk Assessment", "Policy Adherence", "Escalation"],
    "module": ["Spotting phishing", "Reporting", "Safe links"],
}


@pytest.fixture
def app():
    app = create_app('config.TestConfig')
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    # The app fixture keeps one app context open, so every test-client request
    # shares the same `g`; drop Flask-Login's cached user so each request is
    # authenticated from its own headers, as it is in production.
    from flask import g, request_started

    def _reset_login_user(sender, **extra):
        g.pop('_login_user', None)

    request_started.connect(_reset_login_user, app)
    yield app.test_client()
    request_started.disconnect(_reset_login_user, app)


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def department(db):
    d = Department(name="Security")
    db.session.add(d)
    db.session.commit()
    return d


@pytest.fixture
def scenario(db, department):
    s = Scenario(
        title="Phishing Awareness",
        scenario_text="Employees learn to recognise phishing emails and report them.",
        task="Answer the questions.",
        difficulty="Normal",
        rubric=RUBRIC,
        hint="Look at the sender.",
        creator_id="admin-1",
        source_file="uploads/admin-1/1-phishing.pdf",
        status="draft",
        category="Phishing Awareness",
        skill="Phishing",
        department_id=department.id,
        post_assessment_date="2026-11-01",
    )
    db.session.add(s)
    db.session.commit()
    return s


@pytest.fixture
def employee(db):
    e = Employee(name="Ada Lovelace", job_title="Analyst", department="Security",
                 ranking=5, win_rate=85, streak=12)
    db.session.add(e)
    db.session.commit()
    return e


@pytest.fixture
def make_assessment(db):
    def _make(employee, scenario, score=70, created_at=None):
        a = Assessment(user_id=employee.id, scenario_id=scenario.id if scenario else "missing",
                       score=score, feedback='{"generic": "ok", "department": "", "module": ""}',
                       user_response='[]', difficulty="Normal")
        if created_at is not None:
            a.created_at = created_at
        db.session.add(a)
        db.session.commit()
        return a
    return _make


@pytest.fixture
def auth_header(app):
    def _header(user_id, role):
        token = issue_token({"id": user_id, "role": role, "name": "Test"})
        return {"Authorization": f"Bearer {token}"}
    return _header


@pytest.fixture
def model_replies(monkeypatch):
    """Queue canned model replies; records every prompt sent."""
    state = {"replies": [], "prompts": []}

    def fake_invoke(prompt, max_tokens, temperature):
        state["prompts"].append({"prompt": prompt, "max_tokens": max_tokens, "temperature": temperature})
        if not state["replies"]:
            raise AssertionError("unexpected model call")
        return state["replies"].pop(0)

    monkeypatch.setattr('academy.services.generation.invoke_model', fake_invoke)
    return state


class FakeS3:
    def __init__(self, objects=None, fail=False):
        self.objects = objects or {}
        self.fail = fail
        self.presigned = []

    def generate_presigned_url(self, op, Params, ExpiresIn):
        self.presigned.append((op, Params, ExpiresIn))
        return f"https://s3.example/{Params['Bucket']}/{Params['Key']}?X-Amz-Expires={ExpiresIn}"

    def get_object(self, Bucket, Key):
        from botocore.exceptions import ClientError
        if self.fail or Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}


class FakeTextract:
    def __init__(self, start_error=None, statuses=("SUCCEEDED",), pages=(["line one", "line two"],)):
        self.start_error = start_error
        self.statuses = list(statuses)
        self.pages = list(pages)
        self.polls = 0

    def start_document_text_detection(self, DocumentLocation):
        if self.start_error:
            raise self.start_error
        return {"JobId": "job-1"}

    def get_document_text_detection(self, JobId, NextToken=None):
        index = int(NextToken) if NextToken else 0
        if NextToken is None:
            self.polls += 1
            status = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
            if status != "SUCCEEDED":
                return {"JobStatus": status}
        lines = self.pages[index]
        resp = {
            "JobStatus": "SUCCEEDED",
            "Blocks": [{"BlockType": "PAGE"}] + [{"BlockType": "LINE", "Text": t} for t in lines],
        }
        if index + 1 < len(self.pages):
            resp["NextToken"] = str(index + 1)
        return resp


@pytest.fixture
def fake_s3(monkeypatch):
    s3 = FakeS3()
    monkeypatch.setattr('academy.services.storage.s3_client', lambda: s3)
    return s3


@pytest.fixture
def fake_textract(monkeypatch):
    def _install(**kwargs):
        client = FakeTextract(**kwargs)
        monkeypatch.setattr('academy.services.extraction.textract_client', lambda: client)
        return client
    return _install
