from flask import Flask, request, jsonify

from feedaggregator.config.settings import KEYWORDS, DISPLAY_LIMIT, ALL_FILTER
from feedaggregator.core.aggregator import NewsAggregator

app = Flask(__name__)

# Single aggregator shared by all requests
aggregator = NewsAggregator()


def _iso(value):
    return value.isoformat() if value else None


def serialize_item(item):
    data = item.to_dict()
    data['excerpt'] = item.excerpt()
    return data


@app.route('/api/news')
def list_news():
    """Current merged items, filtered by ?keyword= and ?source="""
    keyword = request.args.get('keyword', ALL_FILTER)
    source = request.args.get('source', ALL_FILTER)
    try:
        limit = int(request.args.get('limit', DISPLAY_LIMIT))
    except ValueError:
        return jsonify({'error': 'limit must be an integer'}), 400

    items = aggregator.filtered_items(keyword, source, limit)
    return jsonify({
        'items': [serialize_item(item) for item in items],
        'status': aggregator.status,
        'updatedAt': _iso(aggregator.updated_at),
    })


@app.route('/api/status')
def status():
    return jsonify({
        'status': aggregator.status,
        'updatedAt': _iso(aggregator.updated_at),
        'state': aggregator.state.value,
        'phase': aggregator.phase.value if aggregator.phase else None,
        'itemCount': len(aggregator.items),
    })


@app.route('/api/refresh', methods=['POST'])
def refresh():
    """Run a refresh cycle; 409 if one is already running"""
    report = aggregator.refresh()
    if report is None:
        return jsonify({'error': 'Refresh already in progress', 'status': aggregator.status}), 409

    return jsonify({
        'status': aggregator.status,
        'updatedAt': _iso(aggregator.updated_at),
        'total': report.total,
        'succeeded': report.succeeded,
        'failed': report.failed,
        'itemCount': report.item_count,
        'totalFailure': report.total_failure,
    })


@app.route('/api/sources')
def sources():
    return jsonify([ALL_FILTER] + [source.name for source in aggregator.sources])


@app.route('/api/keywords')
def keywords():
    return jsonify(KEYWORDS)


if __name__ == '__main__':
    app.run(debug=True)
