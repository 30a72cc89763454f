from flask import Blueprint, g, jsonify

from medihub import inventory
from medihub.auth import role_required
from medihub.identity import Role, display_name
from medihub.models import Medicine, Order
from medihub.routes.accounts import register_account_routes
from medihub.routes.common import get_payload, parse_id

supplier = Blueprint('supplier', __name__, url_prefix='/supplier')
register_account_routes(supplier, Role.SUPPLIER)


@supplier.route('/dashboard')
@role_required(Role.SUPPLIER, page=True)
def dashboard():
    current = g.current_user
    return jsonify({
        'name': display_name(current),
        'supplierID': current.supplier_code,
        'medicines': Medicine.query.filter_by(supplier_id=current.id).count(),
        'pendingOrders': Order.query.filter_by(supplier_id=current.id, status='pending').count(),
    })


@supplier.route('/api/add-medicine', methods=['POST'])
@role_required(Role.SUPPLIER)
def add_medicine():
    medicine = inventory.add_medicine(g.current_user, get_payload())
    return jsonify({'message': 'Medicine added successfully', 'medicine': inventory.serialize_medicine(medicine)}), 201


@supplier.route('/api/medicines')
@role_required(Role.SUPPLIER)
def list_medicines():
    stock = (
        Medicine.query.filter_by(supplier_id=g.current_user.id)
        .order_by(Medicine.created_at.desc(), Medicine.id.desc())
        .all()
    )
    return jsonify([inventory.serialize_medicine(medicine) for medicine in stock])


@supplier.route('/api/medicines/<medicine_id>', methods=['GET'])
@role_required(Role.SUPPLIER)
def get_medicine(medicine_id):
    medicine = inventory.get_supplier_medicine(g.current_user, parse_id(medicine_id, 'medicine ID'))
    return jsonify(inventory.serialize_medicine(medicine))


@supplier.route('/api/medicines/<medicine_id>', methods=['DELETE'])
@role_required(Role.SUPPLIER)
def delete_medicine(medicine_id):
    inventory.delete_medicine(g.current_user, parse_id(medicine_id, 'medicine ID'))
    return jsonify({'message': 'Medicine removed successfully'})


@supplier.route('/api/orders')
@role_required(Role.SUPPLIER)
def list_orders():
    received = (
        Order.query.filter_by(supplier_id=g.current_user.id)
        .order_by(Order.created_at.desc(), Order.id.desc())
        .all()
    )
    return jsonify([inventory.serialize_order(order) for order in received])


@supplier.route('/api/orders/<int:order_id>/status', methods=['POST'])
@role_required(Role.SUPPLIER)
def update_order_status(order_id):
    order = inventory.update_order_status(g.current_user, order_id, get_payload().get('status'))
    return jsonify({'message': 'Order updated', 'order': inventory.serialize_order(order)})
