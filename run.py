#!/usr/bin/env python3
"""
Main entry point for running the DoubleVision API
"""

from doublevision.main import create_app
import os

if __name__ == '__main__':
    # Set environment
    os.environ.setdefault('FLASK_ENV', 'development')
    
    # Create and run app
    app = create_app()
    
    print("Starting DoubleVision API...")
    print("Access the application at: http://localhost:5000")
    print("Health check at: http://localhost:5000/health")
    print("\nPress CTRL+C to stop the server")
    
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get('PORT', 5000)),
        debug=True
    )
