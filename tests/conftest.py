import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///test_doublevision.db')
os.environ.setdefault('ALERTS_IN_BACKGROUND', 'false')

import json
from datetime import datetime
import pytest
from doublevision.database import drop_db, init_db, DatabaseManager
from doublevision.models import User, Photo, ReviewAssignment
from doublevision.utils.context import RequestContext

NOW = datetime(2025, 6, 15, 12, 0, 0)


def long_comment(words=60):
    """A review comment comfortably above the minimum length"""
    sentence = "The light falls softly across the subject and the framing keeps the eye moving"
    parts = sentence.split()
    return ' '.join(parts[i % len(parts)] for i in range(words))


def ctx_for(user, now=NOW):
    return RequestContext(user_id=user.id, now=now)


class FakeClassifier:
    """Stands in for the Gemini client with a fixed verdict"""
    
    is_configured = True
    
    def __init__(self, **verdict):
        self.verdict = {
            'isOffensive': False,
            'isAiGenerated': False,
            'isRelevant': True,
            'confidence': 90,
            'reasoning': 'Constructive photography critique'
        }
        self.verdict.update(verdict)
        self.calls = []
    
    def analyze(self, text):
        self.calls.append(text)
        return json.dumps(self.verdict)


class RecordingAlerts:
    def __init__(self):
        self.alerts = []
    
    def send_moderation_alert(self, alert):
        self.alerts.append(alert)
        return True


@pytest.fixture
def db():
    """Fresh schema per test"""
    init_db()
    yield
    drop_db()


@pytest.fixture
def make_user(db):
    user_db = DatabaseManager(User)
    counter = {'n': 0}
    
    def _make_user(**kwargs):
        counter['n'] += 1
        kwargs.setdefault('email', f"user{counter['n']}@test.com")
        kwargs.setdefault('name', f"User {counter['n']}")
        return user_db.create(**kwargs)
    
    return _make_user


@pytest.fixture
def make_photo(db):
    photo_db = DatabaseManager(Photo)
    
    def _make_photo(owner, **kwargs):
        kwargs.setdefault('image_url', f"/uploads/{owner.id}.jpg")
        kwargs.setdefault('upload_date', NOW)
        return photo_db.create(user_id=owner.id, **kwargs)
    
    return _make_photo


@pytest.fixture
def assign(db):
    assignment_db = DatabaseManager(ReviewAssignment)
    
    def _assign(user, photo, completed=False):
        return assignment_db.create(
            user_id=user.id,
            photo_id=photo.id,
            completed=completed,
            assigned_at=NOW
        )
    
    return _assign


def auth_header(user, role='member'):
    from doublevision.utils.security import generate_token
    return {'Authorization': f"Bearer {generate_token({'user_id': user.id, 'role': role})}"}


@pytest.fixture
def app(db, tmp_path):
    from doublevision.main import create_app
    from doublevision.routes import photos, reviews
    from doublevision.services.moderation_service import ModerationService
    from doublevision.services.photo_service import LocalPhotoStorage
    
    application = create_app('testing')
    
    reviews.review_service.moderation_service = ModerationService(client=FakeClassifier())
    reviews.review_service.alert_service = RecordingAlerts()
    reviews.review_service.rate_limiter.reset()
    photos.photo_service.storage = LocalPhotoStorage(folder=str(tmp_path))
    
    yield application


@pytest.fixture
def client(app):
    return app.test_client()
