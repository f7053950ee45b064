from datetime import timedelta
from jose import jwt, JWTError
from config.config import Config
from doublevision.utils.context import utcnow

# JWT settings
SECRET_KEY = Config.SECRET_KEY
ALGORITHM = "HS256"


def generate_token(data: dict, expires_delta: timedelta = None) -> str:
    """Generate JWT token"""
    to_encode = data.copy()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=Config.ACCESS_TOKEN_EXPIRE_MINUTES)
    
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


def verify_token(token: str) -> dict:
    """Verify and decode JWT token"""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None
