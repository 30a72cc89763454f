from datetime import datetime

from medihub import db
from medihub.errors import DuplicateIdError, NotFoundError, ValidationError, InvalidTransitionError
from medihub.identity import clean_text, display_name
from medihub.models import Medicine, Order
from medihub.persistence import commit

MEDICINE_FIELDS = ('name', 'medicineID', 'quantity', 'cost', 'manufacturer', 'expiryDate')

ORDER_TRANSITIONS = {
    'pending': {'shipped', 'cancelled'},
    'shipped': {'delivered'},
    'delivered': set(),
    'cancelled': set(),
}


def add_medicine(supplier, payload) -> Medicine:
    missing = [key for key in MEDICINE_FIELDS if not str(payload.get(key) or '').strip()]
    if missing:
        raise ValidationError('All fields are required', details=f'Missing {", ".join(missing)}')

    try:
        quantity = int(payload['quantity'])
        cost = float(payload['cost'])
    except (TypeError, ValueError):
        raise ValidationError('Invalid input', details='Quantity and cost must be numbers') from None
    if quantity < 0 or cost < 0:
        raise ValidationError('Invalid input', details='Quantity and cost cannot be negative')

    try:
        expiry_date = datetime.strptime(str(payload['expiryDate']).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError('Invalid input', details='expiryDate must be in YYYY-MM-DD format') from None

    medicine_code = str(payload['medicineID']).strip()
    if Medicine.query.filter_by(medicine_code=medicine_code).first() is not None:
        raise DuplicateIdError('Medicine ID already exists', details='A medicine with this ID already exists')

    medicine = Medicine(
        supplier_id=supplier.id,
        name=str(payload['name']).strip(),
        medicine_code=medicine_code,
        quantity=quantity,
        cost=cost,
        manufacturer=str(payload['manufacturer']).strip(),
        expiry_date=expiry_date,
    )
    db.session.add(medicine)
    commit('add medicine', conflict=DuplicateIdError('Medicine ID already exists'))
    return medicine


def get_supplier_medicine(supplier, medicine_id) -> Medicine:
    medicine = Medicine.query.filter_by(id=medicine_id, supplier_id=supplier.id).first()
    if medicine is None:
        raise NotFoundError('Medicine not found or unauthorized')
    return medicine


def delete_medicine(supplier, medicine_id):
    db.session.delete(get_supplier_medicine(supplier, medicine_id))
    commit('remove medicine')


def place_order(patient, medicine_id, quantity) -> Order:
    try:
        quantity = int(quantity)
    except (TypeError, ValueError):
        raise ValidationError(details='quantity must be a whole number') from None
    if quantity <= 0:
        raise ValidationError(details='quantity must be positive')

    medicine = db.session.get(Medicine, medicine_id)
    if medicine is None:
        raise NotFoundError('Medicine not found')
    if medicine.quantity < quantity:
        raise ValidationError('Insufficient stock', details=f'Only {medicine.quantity} units available')

    medicine.quantity -= quantity
    order = Order(
        medicine_id=medicine.id,
        patient_id=patient.id,
        supplier_id=medicine.supplier_id,
        quantity=quantity,
        total_cost=round(quantity * medicine.cost, 2),
    )
    db.session.add(order)
    commit('place order')
    return order


def update_order_status(supplier, order_id, new_status) -> Order:
    order = Order.query.filter_by(id=order_id, supplier_id=supplier.id).first()
    if order is None:
        raise NotFoundError('Order not found')

    new_status = clean_text(new_status, 'status').lower()
    if new_status not in ORDER_TRANSITIONS.get(order.status, set()):
        raise InvalidTransitionError('Invalid order status change', details=f'Cannot move order from {order.status} to {new_status}')

    if new_status == 'cancelled':
        order.medicine.quantity += order.quantity
    order.status = new_status
    commit('update order')
    return order


def serialize_medicine(medicine: Medicine) -> dict:
    return {
        'id': medicine.id,
        'name': medicine.name,
        'medicineID': medicine.medicine_code,
        'quantity': medicine.quantity,
        'cost': f'{medicine.cost:.2f}',
        'manufacturer': medicine.manufacturer,
        'expiryDate': medicine.expiry_date.isoformat(),
        'supplierId': medicine.supplier_id,
    }


def serialize_order(order: Order) -> dict:
    return {
        'id': order.id,
        'medicine': order.medicine.name,
        'medicineId': order.medicine.medicine_code,
        'patient': display_name(order.patient),
        'quantity': order.quantity,
        'totalCost': order.total_cost,
        'status': order.status,
        'orderDate': order.created_at.strftime('%Y-%m-%d'),
    }
