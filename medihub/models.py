from datetime import datetime, timezone

from medihub import db


def utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class PrincipalMixin:
    """Columns shared by every account table.

    Contact fields are stored encrypted; the *_lookup columns hold the HMAC
    of the normalized value and are what uniqueness checks and logins query.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.Text, nullable=False)
    email = db.Column(db.Text, nullable=False)
    email_lookup = db.Column(db.String(64), unique=True, index=True, nullable=False)
    mobile = db.Column(db.Text, nullable=False)
    mobile_lookup = db.Column(db.String(64), unique=True, index=True, nullable=False)
    address = db.Column(db.Text, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    last_login = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())


class Patient(PrincipalMixin, db.Model):
    __tablename__ = 'patients'
    dob = db.Column(db.Date)
    gender = db.Column(db.Enum('male', 'female', 'other', name='patient_gender'))


class Doctor(PrincipalMixin, db.Model):
    __tablename__ = 'doctors'
    is_approved = db.Column(db.Boolean, nullable=False, default=False)
    ssn = db.Column(db.String(16), unique=True)
    registration_number = db.Column(db.String(64), unique=True, nullable=False)
    specialization = db.Column(db.String(100))
    college = db.Column(db.Text, nullable=False)
    year_of_passing = db.Column(db.String(4), nullable=False)
    location = db.Column(db.Text, nullable=False)
    online_status = db.Column(db.Enum('online', 'offline', name='doctor_online_status'), nullable=False, default='offline')
    consultation_fee = db.Column(db.Float, nullable=False, default=100)


class Admin(PrincipalMixin, db.Model):
    __tablename__ = 'admins'


class Employee(PrincipalMixin, db.Model):
    __tablename__ = 'employees'


class Supplier(PrincipalMixin, db.Model):
    __tablename__ = 'suppliers'
    supplier_code = db.Column(db.String(64), unique=True, nullable=False)
    medicines = db.relationship('Medicine', backref='supplier', cascade='all, delete-orphan', lazy=True)


class Appointment(db.Model):
    __tablename__ = 'appointments'
    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=True)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False)
    date = db.Column(db.Date, nullable=False)
    time = db.Column(db.String(5), nullable=False)
    status = db.Column(
        db.Enum('pending', 'confirmed', 'completed', 'cancelled', 'blocked', name='appointment_status'),
        nullable=False,
        default='pending',
    )
    type = db.Column(db.Enum('online', 'offline', name='appointment_type'))
    consultation_fee = db.Column(db.Float)
    notes = db.Column(db.Text)
    is_blocked_slot = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp(), onupdate=utcnow)

    patient = db.relationship('Patient', lazy=True)
    doctor = db.relationship('Doctor', lazy=True)
    messages = db.relationship('ChatMessage', backref='appointment', cascade='all, delete-orphan', lazy=True)
    prescriptions = db.relationship('Prescription', backref='appointment', cascade='all, delete-orphan', lazy=True)


class Prescription(db.Model):
    __tablename__ = 'prescriptions'
    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False)
    doctor_id = db.Column(db.Integer, db.ForeignKey('doctors.id', ondelete='CASCADE'), nullable=False)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False)
    age = db.Column(db.Integer, nullable=False)
    gender = db.Column(db.Enum('male', 'female', 'other', name='prescription_gender'), nullable=False)
    weight = db.Column(db.Float, nullable=False)
    symptoms = db.Column(db.Text, nullable=False)
    additional_notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, server_default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, server_default=db.func.current_timestamp(), onupdate=utcnow)

    doctor = db.relationship('Doctor', lazy=True)
    patient = db.relationship('Patient', lazy=True)
    medicines = db.relationship(
        'PrescriptionMedicine',
        backref='prescription',
        cascade='all, delete-orphan',
        order_by='PrescriptionMedicine.id',
        lazy=True,
    )


class PrescriptionMedicine(db.Model):
    __tablename__ = 'prescription_medicines'
    id = db.Column(db.Integer, primary_key=True)
    prescription_id = db.Column(db.Integer, db.ForeignKey('prescriptions.id', ondelete='CASCADE'), nullable=False)
    medicine_name = db.Column(db.Text, nullable=False)
    dosage = db.Column(db.Text, nullable=False)
    frequency = db.Column(db.Text, nullable=False)
    duration = db.Column(db.Text, nullable=False)
    instructions = db.Column(db.Text)


class ChatMessage(db.Model):
    __tablename__ = 'chat_messages'
    id = db.Column(db.Integer, primary_key=True)
    appointment_id = db.Column(db.Integer, db.ForeignKey('appointments.id', ondelete='CASCADE'), nullable=False)
    sender_id = db.Column(db.Integer, nullable=False)
    sender_type = db.Column(db.Enum('patient', 'doctor', name='chat_sender_type'), nullable=False)
    message = db.Column(db.Text, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)


class Blog(db.Model):
    __tablename__ = 'blogs'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.Text, nullable=False)
    theme = db.Column(db.String(64), nullable=False, index=True)
    content = db.Column(db.Text, nullable=False)
    author_name = db.Column(db.Text, nullable=False)
    author_email = db.Column(db.Text, nullable=False)
    author_type = db.Column(db.Enum('user', 'doctor', 'employee', name='blog_author_type'), nullable=False, default='user')
    image_urls = db.Column(db.JSON, nullable=False, default=list)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)


class Medicine(db.Model):
    __tablename__ = 'medicines'
    id = db.Column(db.Integer, primary_key=True)
    supplier_id = db.Column(db.Integer, db.ForeignKey('suppliers.id', ondelete='CASCADE'), nullable=False)
    name = db.Column(db.Text, nullable=False)
    medicine_code = db.Column(db.String(64), unique=True, nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    cost = db.Column(db.Float, nullable=False)
    manufacturer = db.Column(db.Text, nullable=False)
    expiry_date = db.Column(db.Date, nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    orders = db.relationship('Order', backref='medicine', cascade='all, delete-orphan', lazy=True)


class Order(db.Model):
    __tablename__ = 'orders'
    id = db.Column(db.Integer, primary_key=True)
    medicine_id = db.Column(db.Integer, db.ForeignKey('medicines.id', ondelete='CASCADE'), nullable=False)
    patient_id = db.Column(db.Integer, db.ForeignKey('patients.id', ondelete='CASCADE'), nullable=False)
    supplier_id = db.Column(db.Integer, db.ForeignKey('suppliers.id', ondelete='CASCADE'), nullable=False)
    quantity = db.Column(db.Integer, nullable=False)
    total_cost = db.Column(db.Float, nullable=False)
    status = db.Column(
        db.Enum('pending', 'shipped', 'delivered', 'cancelled', name='order_status'),
        nullable=False,
        default='pending',
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    patient = db.relationship('Patient', lazy=True)
