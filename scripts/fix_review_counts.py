#!/usr/bin/env python3
"""
Maintenance script that recomputes every photo's review count and average
from its approved reviews.
Run via cron nightly: 0 3 * * * /path/to/venv/bin/python /path/to/fix_review_counts.py
"""

import sys
import os
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from doublevision.services.photo_service import PhotoService
from doublevision.utils.context import utcnow
from doublevision.utils.logger import get_logger
from doublevision.database import init_db

logger = get_logger('doublevision.fix_review_counts')


def main():
    """Main repair job function"""
    logger.info(f"Starting review count repair at {utcnow()}")
    
    try:
        # Initialize database
        init_db()
        
        result = PhotoService().fix_review_counts()
        
        logger.info(result['message'])
        
    except Exception as e:
        logger.error(f"Error repairing review counts: {str(e)}")
        raise


if __name__ == "__main__":
    main()
