import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    DATABASE_URL = os.environ.get('DATABASE_URL') or 'sqlite:///doublevision.db'
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    
    # API Keys
    GEMINI_API_KEY = os.environ.get('GEMINI_API_KEY')
    GEMINI_MODEL = os.environ.get('GEMINI_MODEL', 'gemini-2.0-flash-exp')
    GEMINI_TIMEOUT_SECONDS = int(os.environ.get('GEMINI_TIMEOUT_SECONDS', '15'))
    LINEAR_API_KEY = os.environ.get('LINEAR_API_KEY')
    LINEAR_TEAM_ID = os.environ.get('LINEAR_TEAM_ID')
    
    # Application Settings
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'public/uploads')
    MAX_UPLOAD_BYTES = int(os.environ.get('MAX_UPLOAD_BYTES', str(10 * 1024 * 1024)))
    ALLOWED_IMAGE_TYPES = ['image/jpeg', 'image/jpg', 'image/png', 'image/webp']
    ALERTS_IN_BACKGROUND = os.environ.get('ALERTS_IN_BACKGROUND', 'true').lower() == 'true'
    
    # Rate Limiting
    REVIEW_RATE_LIMIT = os.environ.get('REVIEW_RATE_LIMIT', '10/hour')
    
    # Token Settings
    ACCESS_TOKEN_EXPIRE_MINUTES = 60 * 24  # 24 hours
    
    # Reputation
    INITIAL_ELO = 1000
    ELO_APPROVAL_GAIN = 8
    ELO_REJECTION_LOSS = 12
    ELO_WORD_CAP = 200
    ELO_WORDS_PER_POINT = 40
    QUALITY_NEUTRAL_SCORE = 3
    QUALITY_ELO_MULTIPLIER = 15
    
    # Strikes
    MAX_STRIKES = 3
    STRIKE_TIMEOUT_DAYS = 7
    
    # Review Distribution
    REVIEWS_PER_PHOTO = 5
    ASSIGNMENTS_PER_BATCH = 5
    MIN_REVIEWS_FOR_FEEDBACK = 5
    
    # Review Content
    MIN_REVIEW_WORDS = 50
    MAX_REVIEW_LENGTH = 5000
    
    # Logging
    LOG_FILE = 'logs/doublevision.log'
    LOG_LEVEL = 'INFO'


class DevelopmentConfig(Config):
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    DEBUG = True
    TESTING = True
    DATABASE_URL = 'sqlite:///test_doublevision.db'
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    ALERTS_IN_BACKGROUND = False


class ProductionConfig(Config):
    DEBUG = False
    TESTING = False


config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}
