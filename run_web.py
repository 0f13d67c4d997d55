#!/usr/bin/env python3
"""Script to run the news JSON API."""

from dotenv import load_dotenv

load_dotenv()

from feedaggregator.web.app import app  # noqa: E402

if __name__ == '__main__':
    print("Starting feed aggregator API...")
    print("Visit http://localhost:3000/api/news to read the merged feed")
    app.run(debug=True, host='0.0.0.0', port=3000)
