# File: opsdesk/controllers/banks.py
from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from opsdesk.data.banks import CURRENCIES, PRIORITY_COUNTRIES, get_country_info
from opsdesk.services.bank_service import BankService
from opsdesk.utils import admin_required, get_json_body

banks_bp = Blueprint('banks', __name__, url_prefix='/api/banks')


@banks_bp.route('', methods=['GET'])
@login_required
def list_banks():
    country = request.args.get('country')
    query = request.args.get('q')
    if query:
        return jsonify(BankService.search(query))
    if country:
        country = country.upper()
        return jsonify({
            'country': get_country_info(country),
            'banks': BankService.banks_for_country(country),
        })
    return jsonify({
        'countries': BankService.countries(),
        'currencies': CURRENCIES,
        'priorityCountries': list(PRIORITY_COUNTRIES),
    })


@banks_bp.route('', methods=['POST'])
@login_required
def add_bank():
    bank = BankService.add_custom_bank(user=current_user, data=get_json_body())
    return jsonify(bank.to_dict()), 201


@banks_bp.route('', methods=['DELETE'])
@admin_required
def delete_bank():
    BankService.delete_custom_bank(user=current_user, bank_id=request.args.get('id'))
    return jsonify({'success': True})
