"""
Main entry point for the Earn Tracker application.
"""

from earn_tracker import create_app
import os

app = create_app()

if __name__ == "__main__":
    # Get port from environment or use default
    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV') == 'development'

    app.logger.info("Earn Tracker starting at http://127.0.0.1:%s", port)
    app.run(host='127.0.0.1', port=port, debug=debug)
