import io
from doublevision.database import DatabaseManager
from doublevision.models import User
from conftest import auth_header, long_comment


class TestAuth:
    """Test authentication on the API surface"""
    
    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json() == {'status': 'ok'}
    
    def test_missing_token(self, client):
        response = client.get('/api/assignments')
        assert response.status_code == 401
        assert response.get_json() == {'error': 'Unauthorized'}
    
    def test_invalid_token(self, client):
        response = client.get('/api/assignments', headers={'Authorization': 'Bearer not-a-token'})
        assert response.status_code == 401
    
    def test_admin_routes_require_admin(self, client, make_user):
        member = make_user()
        response = client.post('/api/admin/fix-review-counts', headers=auth_header(member))
        assert response.status_code == 403


class TestReviewEndpoints:
    """Test assignment and review routes"""
    
    def test_assign_and_review(self, client, make_user, make_photo):
        owner = make_user()
        reviewer = make_user()
        photo = make_photo(owner)
        headers = auth_header(reviewer)
        
        response = client.get('/api/assignments', headers=headers)
        assert response.status_code == 200
        assert [a['photoId'] for a in response.get_json()['assignments']] == [photo.id]
        
        body = {'photoId': photo.id, 'score': 81, 'comment': long_comment()}
        response = client.post('/api/reviews', json=body, headers=headers)
        assert response.status_code == 201
        assert response.get_json()['moderation']['status'] == 'approved'
        
        response = client.post('/api/reviews', json=body, headers=headers)
        assert response.status_code == 403
    
    def test_validation_error(self, client, make_user):
        response = client.post(
            '/api/reviews',
            json={'photoId': 1, 'score': 50, 'comment': 'Nice shot'},
            headers=auth_header(make_user())
        )
        assert response.status_code == 400
        assert response.get_json()['wordCount'] == 2
    
    def test_non_json_body(self, client, make_user):
        response = client.post('/api/reviews', data='photoId=1', headers=auth_header(make_user()))
        assert response.status_code == 400


class TestUserEndpoints:
    """Test profile, strikes and analytics routes"""
    
    def test_profile(self, client, make_user):
        user = make_user(name='Ada')
        response = client.get('/api/user/profile', headers=auth_header(user))
        assert response.status_code == 200
        assert response.get_json()['name'] == 'Ada'
        assert response.get_json()['eloRating'] == 1000
    
    def test_strikes(self, client, make_user):
        user = make_user(strikes=2)
        response = client.get('/api/user/strikes', headers=auth_header(user))
        assert response.status_code == 200
        assert response.get_json() == {'strikes': 2, 'isTimedOut': False, 'maxStrikes': 3}
    
    def test_strikes_unknown_user(self, client, make_user):
        ghost = User(id=4242)
        response = client.get('/api/user/strikes', headers=auth_header(ghost))
        assert response.status_code == 404
    
    def test_analytics(self, client, make_user, make_photo):
        user = make_user()
        make_photo(user, average_score=91.0)
        response = client.get('/api/user/analytics', headers=auth_header(user))
        assert response.status_code == 200
        assert response.get_json()['distribution']['excellent'] == 1


class TestPhotoEndpoints:
    """Test upload and feedback routes"""
    
    def test_upload(self, client, make_user):
        user = make_user()
        data = {'photo': (io.BytesIO(b'\xff\xd8\xff' * 100), 'sunset.jpg', 'image/jpeg')}
        
        response = client.post('/api/photos', data=data, headers=auth_header(user),
                               content_type='multipart/form-data')
        assert response.status_code == 201
        assert DatabaseManager(User).get(user.id).photo_count == 1
    
    def test_upload_without_file(self, client, make_user):
        response = client.post('/api/photos', headers=auth_header(make_user()))
        assert response.status_code == 400
    
    def test_feedback_not_found(self, client, make_user):
        response = client.get('/api/photos/9999/feedback', headers=auth_header(make_user()))
        assert response.status_code == 404


class TestAdminEndpoints:
    """Test admin maintenance routes"""
    
    def test_reset_strikes(self, client, make_user):
        admin = make_user()
        offender = make_user(strikes=2)
        
        response = client.post(f'/api/admin/users/{offender.id}/reset-strikes',
                               headers=auth_header(admin, role='admin'))
        assert response.status_code == 200
        assert DatabaseManager(User).get(offender.id).strikes == 0
        
        response = client.post('/api/admin/users/9999/reset-strikes',
                               headers=auth_header(admin, role='admin'))
        assert response.status_code == 404
    
    def test_fix_review_counts(self, client, make_user, make_photo):
        admin = make_user()
        make_photo(make_user(), reviews_received=3)
        
        response = client.post('/api/admin/fix-review-counts', headers=auth_header(admin, role='admin'))
        assert response.status_code == 200
        assert len(response.get_json()['updates']) == 1
