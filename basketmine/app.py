"""
basketmine Flask backend
========================
HTTP surface over the mining core:
- load baskets (raw lists or transaction + line-item records)
- run Apriori or FP-Growth with rule generation
- compare both algorithms on identical parameters
- browse stored mining results per user

Run with: python -m basketmine.app
Server: http://localhost:5000
"""

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from flask_cors import CORS

from . import config as default_config
from .baskets import convert_numpy_types, extract_baskets, normalize_baskets, profile_dataset, top_items
from .engine import check_basket_limit, compare, run_parameters
from .errors import BasketLimitError, InvalidParameterError
from .models import ALGORITHM_ALIASES, APRIORI, FP_GROWTH, MiningParameters, normalize_algorithm
from .store import MiningResultStore

log = logging.getLogger(__name__)

api = Blueprint('api', __name__, url_prefix='/api')

ALGORITHM_INFO = [
    {
        'id': APRIORI,
        'name': 'Apriori',
        'description': 'Classic level-wise algorithm using candidate generation',
        'max_itemset_size_setting': 'APRIORI_MAX_ITEMSET_SIZE',
    },
    {
        'id': FP_GROWTH,
        'name': 'FP-Growth',
        'description': 'Frequency-ordered mining of frequent items and item pairs',
        'max_itemset_size_setting': 'FP_GROWTH_MAX_ITEMSET_SIZE',
    },
]


# =============================================================================
# APPLICATION FACTORY
# =============================================================================

def create_app(config=None, store=None, basket_source=None):
    """
    Build the Flask application.

    ``config`` overrides the module defaults from ``basketmine.config``.
    ``store`` persists mining results (in-memory by default) and
    ``basket_source`` is a zero-argument callable returning the baskets to
    mine; by default the baskets loaded through ``PUT /api/baskets`` are used.
    """
    app = Flask(__name__)
    app.config.update(default_config.as_dict())
    if config:
        app.config.update(config)

    CORS(app, origins=app.config['CORS_ORIGINS'])

    state = {
        'store': store if store is not None else MiningResultStore(),
        'baskets': [],
        'profile': {},
    }
    state['basket_source'] = basket_source or (lambda: state['baskets'])
    app.extensions['basketmine'] = state

    app.register_blueprint(api)
    return app


def _state():
    return current_app.extensions['basketmine']


def _json_body():
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidParameterError('request body must be a JSON object')
    return data


def _owner_id():
    value = request.headers.get('X-User-Id')
    if value is None or value.strip() == '':
        return None
    try:
        return int(value)
    except ValueError:
        raise InvalidParameterError('X-User-Id must be an integer') from None


def _load_baskets():
    baskets = _state()['basket_source']()
    check_basket_limit(baskets, current_app.config['MAX_BASKETS'])
    return baskets


def _parameters(data, algorithm=None):
    cfg = current_app.config
    defaults = {
        'min_support': cfg['DEFAULT_MIN_SUPPORT'],
        'min_confidence': cfg['DEFAULT_MIN_CONFIDENCE'],
        'algorithm': cfg['DEFAULT_ALGORITHM'],
    }
    if algorithm is not None:
        data = dict(data, algorithm=algorithm)
    return MiningParameters.from_dict(data, defaults)


def _dataset_stats(baskets):
    all_items = set()
    for b in baskets:
        all_items.update(b)
    return {
        'transactions': len(baskets),
        'unique_items': len(all_items),
        'avg_items_per_transaction': (
            round(sum(len(b) for b in baskets) / len(baskets), 2) if baskets else 0
        ),
    }


# =============================================================================
# API ROUTES
# =============================================================================

@api.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({'status': 'ok', 'message': 'basketmine backend is running'})


@api.route('/baskets', methods=['PUT'])
def load_baskets():
    """
    Replace the dataset. Accepts either ready baskets or transaction records
    that are turned into baskets.
    """
    state = _state()

    try:
        data = _json_body()

        if 'baskets' in data:
            baskets = normalize_baskets(data['baskets'])
        elif 'transactions' in data:
            baskets = extract_baskets(
                data['transactions'],
                data.get('transaction_items', []),
                data.get('items'),
            )
        else:
            return jsonify({'error': 'Provide "baskets" or "transactions"'}), 400

        check_basket_limit(baskets, current_app.config['MAX_BASKETS'])

        state['baskets'] = baskets
        state['profile'] = profile_dataset(baskets)
        log.info("loaded %d baskets", len(baskets))

        return jsonify(convert_numpy_types({
            'success': True,
            'message': 'Dataset loaded successfully',
            'stats': _dataset_stats(baskets),
            'profile': state['profile'],
        }))

    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400
    except BasketLimitError as e:
        return jsonify({'error': str(e)}), 413
    except (KeyError, TypeError) as e:
        return jsonify({'error': f'Malformed records: {e}'}), 400
    except Exception as e:
        log.exception("loading baskets failed")
        return jsonify({'error': f'Failed to load baskets: {str(e)}'}), 500


@api.route('/dataset/info', methods=['GET'])
def get_dataset_info():
    """Get information about the current dataset with profiling."""
    try:
        baskets = _state()['basket_source']()
        profile = profile_dataset(baskets)

        stats = _dataset_stats(baskets)
        stats['top_items'] = top_items(baskets)

        return jsonify(convert_numpy_types({
            'success': True,
            'stats': stats,
            'profile': profile,
        }))

    except Exception as e:
        log.exception("dataset info failed")
        return jsonify({'error': str(e)}), 500


@api.route('/algorithms', methods=['GET'])
def get_algorithms():
    """List the mining algorithms and their itemset size caps."""
    algorithms = []
    for info in ALGORITHM_INFO:
        info = dict(info)
        max_size = current_app.config[info.pop('max_itemset_size_setting')]
        if info['id'] == FP_GROWTH:
            max_size = min(max_size, 2)
        info['max_itemset_size'] = max_size
        algorithms.append(info)

    return jsonify({
        'algorithms': algorithms,
        'aliases': ALGORITHM_ALIASES,
        'lift_formula': current_app.config['LIFT_FORMULA'],
    })


def _mine(algorithm=None):
    try:
        data = _json_body()
        parameters = _parameters(data, algorithm)
        owner_id = _owner_id()
        baskets = _load_baskets()

        result = run_parameters(
            parameters, baskets, owner_id,
            store=_state()['store'], settings=current_app.config,
        )

        return jsonify(result.to_dict()), 201

    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400
    except BasketLimitError as e:
        return jsonify({'error': str(e)}), 413
    except Exception as e:
        log.exception("mining failed")
        return jsonify({'error': f'Mining failed: {str(e)}'}), 500


@api.route('/mine', methods=['POST'])
def mine_patterns():
    """Run the algorithm named in the request body."""
    return _mine()


@api.route('/mine/<algorithm>', methods=['POST'])
def mine_with_algorithm(algorithm):
    """Run a fixed algorithm, e.g. ``/api/mine/apriori`` or ``/api/mine/fp-growth``."""
    try:
        algorithm = normalize_algorithm(algorithm)
    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 404
    return _mine(algorithm)


@api.route('/compare', methods=['POST'])
def compare_algorithms():
    """Run both algorithms with the same parameters and compare them."""
    try:
        data = _json_body()
        parameters = _parameters(data)
        owner_id = _owner_id()
        baskets = _load_baskets()

        comparison = compare(
            parameters, baskets, owner_id,
            store=_state()['store'], settings=current_app.config,
        )

        return jsonify(comparison.to_dict())

    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400
    except BasketLimitError as e:
        return jsonify({'error': str(e)}), 413
    except Exception as e:
        log.exception("comparison failed")
        return jsonify({'error': f'Comparison failed: {str(e)}'}), 500


@api.route('/results', methods=['GET'])
def list_results():
    """Results of the calling user, or every result when no user is given."""
    try:
        results = _state()['store'].list(_owner_id())
        return jsonify({'results': [r.to_dict() for r in results]})
    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400


@api.route('/results/<int:result_id>', methods=['GET'])
def get_result(result_id):
    try:
        result = _state()['store'].get(result_id, _owner_id())
    except InvalidParameterError as e:
        return jsonify({'error': str(e)}), 400
    if result is None:
        return jsonify({'error': f'Mining result {result_id} not found'}), 404
    return jsonify(result.to_dict())


if __name__ == '__main__':
    logging.basicConfig(
        level=default_config.LOG_LEVEL,
        format=default_config.LOG_FORMAT,
        datefmt="%H:%M:%S",
    )
    print("="*60)
    print("basketmine backend")
    print("="*60)
    print(f"Apriori max itemset size: {default_config.APRIORI_MAX_ITEMSET_SIZE}")
    print(f"FP-Growth max itemset size: {min(default_config.FP_GROWTH_MAX_ITEMSET_SIZE, 2)}")
    print(f"Lift formula: {default_config.LIFT_FORMULA}")
    print(f"Basket limit: {default_config.MAX_BASKETS}")
    print("="*60)
    create_app().run(host='0.0.0.0', port=5000)
