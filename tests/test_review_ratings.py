import pytest
from unittest.mock import patch
from doublevision.database import DatabaseManager
from doublevision.models import Photo, Review, ReviewRating, User
from doublevision.models.photo import PhotoStatus
from doublevision.models.review import ModerationStatus
from doublevision.services.review_rating_service import ReviewRatingService
from conftest import NOW, ctx_for, long_comment


@pytest.fixture
def rating_service(db):
    return ReviewRatingService()


@pytest.fixture
def reviewed_photo(make_user, make_photo):
    """A photo with five approved reviews from five reviewers"""
    owner = make_user()
    photo = make_photo(owner, reviews_received=5, average_score=70.0)
    review_db = DatabaseManager(Review)
    
    reviewers, reviews = [], []
    for i in range(5):
        reviewer = make_user()
        reviewers.append(reviewer)
        reviews.append(review_db.create(
            photo_id=photo.id,
            reviewer_id=reviewer.id,
            score=60 + i * 5,
            comment=long_comment(),
            word_count=60,
            moderation_status=ModerationStatus.APPROVED,
            ai_analysis={'confidence': 90},
            created_at=NOW
        ))
    return {'owner': owner, 'photo': photo, 'reviewers': reviewers, 'reviews': reviews}


def ratings_for(reviews, scores=None):
    scores = scores or [(3, 3, 3)] * len(reviews)
    return [
        {
            'reviewId': review.id,
            'specificityScore': s,
            'constructivenessScore': c,
            'relevanceScore': r
        }
        for review, (s, c, r) in zip(reviews, scores)
    ]


class TestSubmitRatings:
    """Test the review quality rating protocol"""
    
    def test_ratings_move_reviewer_elo(self, rating_service, reviewed_photo):
        owner, photo, reviews = reviewed_photo['owner'], reviewed_photo['photo'], reviewed_photo['reviews']
        scores = [(5, 5, 5), (1, 1, 1), (3, 3, 3), (4, 4, 5), (2, 3, 3)]
        
        result = rating_service.submit_ratings(
            ctx_for(owner), {'photoId': photo.id, 'ratings': ratings_for(reviews, scores)}
        )
        
        assert 'error' not in result
        changes = {r['reviewerId']: r['eloChange'] for r in result['reviewers']}
        expected = [30, -30, 0, 20, -5]
        user_db = DatabaseManager(User)
        for reviewer, change in zip(reviewed_photo['reviewers'], expected):
            assert changes[reviewer.id] == change
            assert user_db.get(reviewer.id).elo_rating == 1000 + change
        
        revealed = result['reviewers'][0]
        assert revealed['name'] == reviewed_photo['reviewers'][0].name
        assert revealed['overallQuality'] == 5
        assert revealed['eloBefore'] == 1000
        assert revealed['aiConfidence'] == 90
        
        stored_photo = DatabaseManager(Photo).get(photo.id)
        assert stored_photo.all_reviews_rated is True
        assert stored_photo.reviews_rated_count == 5
        
        stored_review = DatabaseManager(Review).get(reviews[3].id)
        assert stored_review.helpfulness_count == 1
        assert stored_review.helpfulness_score == pytest.approx(13 / 3)
    
    def test_second_attempt_rejected(self, rating_service, reviewed_photo):
        owner, photo, reviews = reviewed_photo['owner'], reviewed_photo['photo'], reviewed_photo['reviews']
        payload = {'photoId': photo.id, 'ratings': ratings_for(reviews, [(5, 5, 5)] * 5)}
        
        rating_service.submit_ratings(ctx_for(owner), payload)
        result = rating_service.submit_ratings(ctx_for(owner), payload)
        
        assert result == {'error': 'You have already rated reviews for this photo', 'status': 400}
        reviewer = DatabaseManager(User).get(reviewed_photo['reviewers'][0].id)
        assert reviewer.elo_rating == 1030
    
    def test_only_owner_can_rate(self, rating_service, reviewed_photo, make_user):
        payload = {'photoId': reviewed_photo['photo'].id, 'ratings': ratings_for(reviewed_photo['reviews'])}
        result = rating_service.submit_ratings(ctx_for(make_user()), payload)
        assert result['status'] == 403
    
    def test_unknown_photo(self, rating_service, reviewed_photo):
        payload = {'photoId': 9999, 'ratings': ratings_for(reviewed_photo['reviews'])}
        result = rating_service.submit_ratings(ctx_for(reviewed_photo['owner']), payload)
        assert result == {'error': 'Photo not found', 'status': 404}
    
    def test_requires_five_approved_reviews(self, rating_service, reviewed_photo):
        reviews = reviewed_photo['reviews']
        DatabaseManager(Review).update(reviews[0].id, moderation_status=ModerationStatus.REJECTED)
        
        payload = {'photoId': reviewed_photo['photo'].id, 'ratings': ratings_for(reviews)}
        result = rating_service.submit_ratings(ctx_for(reviewed_photo['owner']), payload)
        assert result == {'error': 'Photo must have exactly 5 approved reviews to rate', 'status': 400}
    
    @pytest.mark.parametrize('payload, message', [
        (None, 'Missing photoId or ratings array'),
        ({'photoId': 1}, 'Missing photoId or ratings array'),
        ({'photoId': 1, 'ratings': 'all good'}, 'Missing photoId or ratings array'),
        ({'photoId': 1, 'ratings': []}, 'Must rate all 5 reviews'),
        ({'photoId': 1, 'ratings': ['great'] * 5}, 'Invalid rating format'),
    ])
    def test_malformed_payload(self, rating_service, reviewed_photo, payload, message):
        result = rating_service.submit_ratings(ctx_for(reviewed_photo['owner']), payload)
        assert result == {'error': message, 'status': 400}
    
    def test_scores_out_of_range(self, rating_service, reviewed_photo):
        ratings = ratings_for(reviewed_photo['reviews'])
        ratings[2]['relevanceScore'] = 6
        
        result = rating_service.submit_ratings(
            ctx_for(reviewed_photo['owner']), {'photoId': reviewed_photo['photo'].id, 'ratings': ratings}
        )
        assert result == {'error': 'All scores must be between 1 and 5', 'status': 400}
    
    def test_duplicate_review_ids(self, rating_service, reviewed_photo):
        reviews = reviewed_photo['reviews']
        ratings = ratings_for(reviews[:4] + reviews[:1])
        
        result = rating_service.submit_ratings(
            ctx_for(reviewed_photo['owner']), {'photoId': reviewed_photo['photo'].id, 'ratings': ratings}
        )
        assert result == {'error': 'Each review must be rated exactly once', 'status': 400}
    
    def test_review_ids_must_match(self, rating_service, reviewed_photo, make_photo):
        other = DatabaseManager(Review).create(
            photo_id=make_photo(reviewed_photo['owner']).id,
            reviewer_id=reviewed_photo['reviewers'][0].id,
            score=50,
            comment=long_comment(),
            word_count=60,
            moderation_status=ModerationStatus.APPROVED
        )
        ratings = ratings_for(reviewed_photo['reviews'][:4] + [other])
        
        result = rating_service.submit_ratings(
            ctx_for(reviewed_photo['owner']), {'photoId': reviewed_photo['photo'].id, 'ratings': ratings}
        )
        assert result == {'error': "Review IDs do not match photo's reviews", 'status': 400}
    
    def test_fractional_score_is_malformed(self, rating_service, reviewed_photo):
        ratings = ratings_for(reviewed_photo['reviews'])
        ratings[1]['specificityScore'] = 3.5
        
        result = rating_service.submit_ratings(
            ctx_for(reviewed_photo['owner']), {'photoId': reviewed_photo['photo'].id, 'ratings': ratings}
        )
        assert result == {'error': 'Invalid rating format', 'status': 400}
    
    def test_archived_photo_cannot_be_rated(self, rating_service, reviewed_photo):
        owner, photo = reviewed_photo['owner'], reviewed_photo['photo']
        DatabaseManager(Photo).update(photo.id, status=PhotoStatus.ARCHIVED)
        
        result = rating_service.submit_ratings(
            ctx_for(owner), {'photoId': photo.id, 'ratings': ratings_for(reviewed_photo['reviews'], [(5, 5, 5)] * 5)}
        )
        
        assert result == {'error': 'This photo has been archived and can no longer be rated', 'status': 400}
        assert DatabaseManager(ReviewRating).count() == 0
        assert DatabaseManager(User).get(reviewed_photo['reviewers'][0].id).elo_rating == 1000
        assert DatabaseManager(Photo).get(photo.id).all_reviews_rated is False
    
    def test_concurrent_duplicate_rating_rejected_by_storage(self, rating_service, reviewed_photo):
        owner, photo, reviews = reviewed_photo['owner'], reviewed_photo['photo'], reviewed_photo['reviews']
        payload = {'photoId': photo.id, 'ratings': ratings_for(reviews, [(5, 5, 5)] * 5)}
        rating_service.submit_ratings(ctx_for(owner), payload)
        
        # Simulate a racing request that passed the already-rated checks
        DatabaseManager(Photo).update(photo.id, all_reviews_rated=False)
        with patch.object(rating_service, 'has_user_rated_photo', return_value=False):
            result = rating_service.submit_ratings(ctx_for(owner), payload)
        
        assert result == {'error': 'You have already rated reviews for this photo', 'status': 400}
        assert DatabaseManager(ReviewRating).count() == 5
        assert DatabaseManager(User).get(reviewed_photo['reviewers'][0].id).elo_rating == 1030


class TestGetRatedReviews:
    """Test the revealed reviewer view"""
    
    def test_hidden_until_rated(self, rating_service, reviewed_photo):
        owner, photo = reviewed_photo['owner'], reviewed_photo['photo']
        
        assert rating_service.get_rated_reviews(ctx_for(owner), photo.id)['status'] == 400
        
        rating_service.submit_ratings(
            ctx_for(owner), {'photoId': photo.id, 'ratings': ratings_for(reviewed_photo['reviews'])}
        )
        result = rating_service.get_rated_reviews(ctx_for(owner), photo.id)
        
        assert len(result['reviewers']) == 5
        assert {r['reviewerId'] for r in result['reviewers']} == {u.id for u in reviewed_photo['reviewers']}
        assert 'eloChange' not in result['reviewers'][0]
    
    def test_other_users_cannot_view(self, rating_service, reviewed_photo, make_user):
        result = rating_service.get_rated_reviews(ctx_for(make_user()), reviewed_photo['photo'].id)
        assert result['status'] == 403
