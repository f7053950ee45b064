import io
import pytest
from datetime import datetime, timedelta
from werkzeug.datastructures import FileStorage
from doublevision.database import DatabaseManager
from doublevision.models import Photo, Review, User
from doublevision.models.photo import PhotoStatus
from doublevision.models.review import ModerationStatus
from doublevision.services.photo_service import LocalPhotoStorage, PhotoService
from conftest import NOW, ctx_for, long_comment


@pytest.fixture
def photo_service(db, tmp_path):
    return PhotoService(storage=LocalPhotoStorage(folder=str(tmp_path)))


def image_upload(name='shot.jpg', content_type='image/jpeg', size=1024):
    return FileStorage(stream=io.BytesIO(b'\xff' * size), filename=name, content_type=content_type)


def add_review(photo, reviewer, score, status=ModerationStatus.APPROVED):
    return DatabaseManager(Review).create(
        photo_id=photo.id,
        reviewer_id=reviewer.id,
        score=score,
        comment=long_comment(),
        word_count=60,
        moderation_status=status
    )


class TestUpload:
    """Test photo uploads"""
    
    def test_upload_creates_photo(self, photo_service, make_user, tmp_path):
        user = make_user()
        result = photo_service.upload_photo(ctx_for(user), image_upload())
        
        assert result['photo']['imageUrl'].startswith('/uploads/')
        assert len(list(tmp_path.iterdir())) == 1
        
        stored_user = DatabaseManager(User).get(user.id)
        assert stored_user.photo_count == 1
        assert stored_user.last_upload == NOW
    
    def test_one_upload_per_day(self, photo_service, make_user):
        user = make_user()
        photo_service.upload_photo(ctx_for(user), image_upload())
        
        result = photo_service.upload_photo(ctx_for(user, now=NOW + timedelta(hours=3)), image_upload())
        assert result['status'] == 403
        
        tomorrow = datetime(NOW.year, NOW.month, NOW.day) + timedelta(days=1)
        assert 'photo' in photo_service.upload_photo(ctx_for(user, now=tomorrow), image_upload())
    
    def test_rejects_bad_files(self, photo_service, make_user):
        user = make_user()
        
        assert photo_service.upload_photo(ctx_for(user), None)['status'] == 400
        assert photo_service.upload_photo(
            ctx_for(user), image_upload('notes.txt', 'text/plain')
        )['status'] == 400
        
        too_big = image_upload(size=10 * 1024 * 1024 + 1)
        assert photo_service.upload_photo(ctx_for(user), too_big)['error'] == 'File too large. Maximum size is 10MB.'
        assert DatabaseManager(Photo).count() == 0


class TestReviewCounts:
    """Test counters and their repair"""
    
    def test_increment_tracks_running_average(self, photo_service, make_user, make_photo):
        photo = make_photo(make_user())
        for score in (60, 80, 70, 90, 100):
            photo_service.increment_photo_review_count(photo.id, score)
        
        stored = DatabaseManager(Photo).get(photo.id)
        assert stored.reviews_received == 5
        assert stored.average_score == pytest.approx(80)
        assert stored.status == PhotoStatus.REVIEWED
    
    def test_archived_photo_is_immutable(self, photo_service, make_user, make_photo):
        photo = make_photo(make_user(), status=PhotoStatus.ARCHIVED)
        assert photo_service.increment_photo_review_count(photo.id, 50) is False
        assert photo_service.recalculate_photo_stats(photo.id) is None
    
    def test_fix_review_counts_repairs_drift(self, photo_service, make_user, make_photo):
        owner = make_user()
        drifted = make_photo(owner, reviews_received=9, average_score=12.0)
        correct = make_photo(owner)
        reviewers = [make_user() for _ in range(3)]
        
        add_review(drifted, reviewers[0], 80)
        add_review(drifted, reviewers[1], 60)
        add_review(drifted, reviewers[2], 10, status=ModerationStatus.REJECTED)
        
        result = photo_service.fix_review_counts()
        
        assert [u['photoId'] for u in result['updates']] == [drifted.id]
        assert result['updates'][0]['reviewsBefore'] == 9
        
        photo_db = DatabaseManager(Photo)
        assert photo_db.get(drifted.id).reviews_received == 2
        assert photo_db.get(drifted.id).average_score == pytest.approx(70)
        assert photo_db.get(correct.id).reviews_received == 0
        assert photo_service.fix_review_counts()['updates'] == []


class TestFeedback:
    """Test the owner feedback view"""
    
    def test_feedback_gated_on_completed_reviews(self, photo_service, make_user, make_photo, assign):
        owner = make_user()
        photo = make_photo(owner)
        add_review(photo, make_user(), 75)
        
        assert photo_service.get_photo_feedback(ctx_for(owner), photo.id)['status'] == 403
        
        other_owner = make_user()
        for _ in range(5):
            assign(owner, make_photo(other_owner), completed=True)
        
        result = photo_service.get_photo_feedback(ctx_for(owner), photo.id)
        assert len(result['reviews']) == 1
        assert 'reviewerId' not in result['reviews'][0]
        assert result['canRate'] is False
    
    def test_feedback_owner_only(self, photo_service, make_user, make_photo):
        photo = make_photo(make_user())
        assert photo_service.get_photo_feedback(ctx_for(make_user()), photo.id)['status'] == 403
        assert photo_service.get_photo_feedback(ctx_for(make_user()), 9999)['status'] == 404


class TestAnalytics:
    """Test score analytics"""
    
    def test_photo_analytics(self, photo_service, make_user, make_photo):
        user = make_user()
        make_photo(user, upload_date=datetime(2024, 12, 1), average_score=97.0)
        make_photo(user, upload_date=datetime(2025, 3, 1), average_score=95.0)
        make_photo(user, upload_date=datetime(2025, 6, 10), average_score=92.0)
        latest = make_photo(user, upload_date=datetime(2025, 6, 14))
        
        analytics = photo_service.get_user_photo_analytics(user.id, now=NOW)
        
        assert analytics['latestPhotoScore'] is None
        assert analytics['latestPhotoDate'] == latest.upload_date.isoformat()
        assert analytics['highestScoreThisMonth'] == 92.0
        assert analytics['highestScoreThisYear'] == 95.0
        assert analytics['highestScoreAllTime'] == 97.0
        assert analytics['averageScoreOverall'] == pytest.approx(94.6667, rel=1e-4)
        assert analytics['totalPhotos'] == 4
        assert analytics['totalReviewed'] == 3
    
    def test_score_distribution(self, photo_service, make_user, make_photo):
        user = make_user()
        for score in (95.0, 80.0, 65.0, 45.0, 20.0, None):
            make_photo(user, average_score=score)
        
        assert photo_service.get_user_score_distribution(user.id) == {
            'excellent': 1, 'good': 1, 'average': 1, 'belowAverage': 1, 'poor': 1
        }
