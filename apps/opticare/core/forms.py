"""
Form schemas for every page that accepts user input

Each schema is a pydantic model. Routes call validate_form() with the submitted
fields and get back either the parsed model or a dict of field -> message that
templates render next to the inputs.
"""
import re
from datetime import date, datetime, timezone
from typing import ClassVar, Dict, List, Optional

from flask import abort
from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator
from pydantic_core import PydanticCustomError

from opticare.config.settings import OptiCareConfig

STRONG_PASSWORD = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$')
PASSWORD_HELP = '≥ 8 characters, 1 uppercase, 1 lowercase, 1 number & 1 special (@$!%*?&)'

EYE_PROBLEM_IDS = [problem_id for problem_id, _ in OptiCareConfig.EYE_PROBLEMS]


def form_error(message, field=None):
    """Validation error carrying our own wording (and target field for model checks)"""
    return PydanticCustomError('form', message, {'field': field} if field else None)


def strong_password(value):
    if not STRONG_PASSWORD.match(value):
        raise form_error(PASSWORD_HELP)
    return value


def store_time(value):
    """Naive form datetimes are wall-clock times at the store"""
    if value.tzinfo is None:
        return value.replace(tzinfo=OptiCareConfig.get_store_timezone())
    return value


def utc_timestamp(value):
    """UTC instant in the backend's timestamp format, e.g. 2099-01-01T04:30:00.000Z"""
    utc = store_time(value).astimezone(timezone.utc)
    return utc.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def store_datetime_input(value):
    """Backend timestamp as a datetime-local value in store time"""
    if not value:
        return ''
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return value[:16]
    return store_time(parsed).astimezone(OptiCareConfig.get_store_timezone()).strftime('%Y-%m-%dT%H:%M')


def future_datetime(value):
    if store_time(value) <= datetime.now(timezone.utc):
        raise form_error('Appointment date must be in the future.')
    return value


class FormModel(BaseModel):
    """Base schema: trims strings and treats blank inputs as missing"""

    model_config = ConfigDict(str_strip_whitespace=True, extra='ignore')

    # field -> message used for the built-in constraint failures of that field
    error_messages: ClassVar[Dict[str, str]] = {}

    @model_validator(mode='before')
    @classmethod
    def blank_to_none(cls, data):
        if isinstance(data, dict):
            return {key: (None if isinstance(value, str) and not value.strip() else value)
                    for key, value in data.items()}
        return data


# --- Auth -------------------------------------------------------------------

class LoginForm(FormModel):
    email: EmailStr
    password: str

    error_messages = {
        'email': 'Invalid email address.',
        'password': 'Password is required.',
    }


class RegisterForm(FormModel):
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    age: int = Field(gt=0)
    email: EmailStr
    password: str = Field(min_length=8)
    address: str = Field(min_length=5)

    error_messages = {
        'name': 'Name must be at least 2 characters.',
        'phone': 'Phone must be at least 10 characters.',
        'age': 'Please enter a valid age.',
        'email': 'Invalid email address.',
        'password': 'Password must be at least 8 characters.',
        'address': 'Address must be at least 5 characters.',
    }

    check_password = field_validator('password')(strong_password)


class RegisterDetailsForm(FormModel):
    """First registration step; the password is only asked with the OTP"""

    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    age: int = Field(gt=0)
    email: EmailStr
    address: str = Field(min_length=5)

    error_messages = {key: value for key, value in RegisterForm.error_messages.items() if key != 'password'}


class OtpForm(FormModel):
    otp: str = Field(min_length=6)

    error_messages = {'otp': 'Your one-time password must be 6 characters.'}


class RegisterOtpForm(OtpForm):
    password: str = Field(min_length=8)

    error_messages = {
        **OtpForm.error_messages,
        'password': RegisterForm.error_messages['password'],
    }

    check_password = field_validator('password')(strong_password)


class EmailForm(FormModel):
    email: EmailStr

    error_messages = {'email': 'Invalid email address.'}


class ResetPasswordForm(FormModel):
    newPassword: str = Field(min_length=8)

    error_messages = {'newPassword': 'Password must be at least 8 characters.'}

    check_password = field_validator('newPassword')(strong_password)


class UpdatePasswordForm(FormModel):
    currentPassword: str
    newPassword: str = Field(min_length=8)
    confirmPassword: Optional[str] = None

    error_messages = {
        'currentPassword': 'Current password is required.',
        'newPassword': 'New password must be at least 8 characters.',
    }

    @model_validator(mode='after')
    def passwords_match(self):
        if self.newPassword != self.confirmPassword:
            raise form_error('New passwords do not match.', 'confirmPassword')
        return self


# --- Bookings ---------------------------------------------------------------

class CallbackForm(FormModel):
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    address: str = Field(min_length=10)

    error_messages = {
        'name': 'Name must be at least 2 characters.',
        'phone': 'Please enter a valid phone number.',
        'address': 'Please enter a complete address.',
    }


class AppointmentForm(FormModel):
    name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(min_length=10)
    address: str = Field(min_length=10)
    eyeProblems: List[str] = Field(default_factory=list, validate_default=True)
    customProblem: Optional[str] = None
    preferredDate: date
    preferredTime: str

    error_messages = {
        'name': 'Name must be at least 2 characters.',
        'email': 'Please enter a valid email.',
        'phone': 'Please enter a valid phone number.',
        'address': 'Please provide a complete address.',
        'preferredDate': 'A date for the appointment is required.',
        'preferredTime': 'Please select a time for the appointment.',
    }

    @field_validator('eyeProblems')
    @classmethod
    def known_problems(cls, value):
        value = [item for item in value if item]
        if not value:
            raise form_error('You have to select at least one item.')
        unknown = [item for item in value if item not in EYE_PROBLEM_IDS]
        if unknown:
            raise form_error(f'Unknown eye problem: {unknown[0]}')
        return value

    @model_validator(mode='after')
    def describe_other(self):
        if 'other' in self.eyeProblems and len(self.customProblem or '') <= 5:
            raise form_error("Please describe your problem if you select 'Other'.", 'customProblem')
        return self

    def to_payload(self):
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'eyeProblems': self.eyeProblems,
            'customProblem': self.customProblem or '',
            'preferredDate': self.preferredDate.isoformat(),
            'preferredTime': self.preferredTime,
        }


class DoctorAppointmentForm(FormModel):
    patientName: str = Field(min_length=2)
    age: int = Field(ge=0, le=150)
    phone: str = Field(min_length=10, max_length=10)
    address: str = Field(min_length=10)
    reasonForVisit: str = Field(min_length=5)
    appointmentDate: datetime

    error_messages = {
        'patientName': 'Name must be at least 2 characters.',
        'age': 'Age must be between 0 and 150.',
        'phone': 'Phone number must be exactly 10 digits.',
        'address': 'Please provide a complete address.',
        'reasonForVisit': 'Please provide a reason for your visit.',
        'appointmentDate': 'An appointment date is required.',
    }

    in_future = field_validator('appointmentDate')(future_datetime)

    def to_payload(self):
        payload = self.model_dump(mode='json')
        payload['appointmentDate'] = utc_timestamp(self.appointmentDate)
        return payload


# --- Reviews ----------------------------------------------------------------

class ReviewForm(FormModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=10, max_length=1000)

    error_messages = {
        'rating': 'Please select a rating.',
        'comment': 'Comment must be between 10 and 1000 characters.',
    }


class AdminReviewForm(FormModel):
    rating: int = Field(ge=1, le=5)
    comment: str = Field(min_length=10)

    error_messages = {
        'rating': 'Rating is required.',
        'comment': 'Comment must be at least 10 characters long.',
    }


# --- Products ---------------------------------------------------------------

class ProductUpdateForm(FormModel):
    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    price: float = Field(ge=0)
    category: str
    specstype: str
    gender: str
    stock: int = Field(ge=0)
    tags: Optional[str] = None

    error_messages = {
        'name': 'Product name must be at least 3 characters.',
        'description': 'Description must be at least 10 characters.',
        'price': 'Price must be a positive number.',
        'category': 'Please select a category.',
        'specstype': 'Please select a specs type.',
        'gender': 'Please select a gender.',
        'stock': 'Stock must be a positive number.',
    }

    def tag_list(self):
        if not self.tags:
            return []
        return [tag.strip() for tag in self.tags.split(',')]

    def to_payload(self):
        payload = self.model_dump(exclude={'tags'})
        payload['tags'] = self.tag_list()
        return payload


class ProductForm(ProductUpdateForm):
    imageUrl: str

    error_messages = {
        **ProductUpdateForm.error_messages,
        'imageUrl': 'Product image is required.',
    }


# --- Patient records ----------------------------------------------------------

class PastUserRecordForm(FormModel):
    """Walk-in eye-test patient kept by admin staff"""

    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    age: Optional[int] = Field(default=None, gt=0)

    error_messages = {
        'name': 'Name is required',
        'phone': 'Phone number is required',
        'email': 'Invalid email address',
        'age': 'Please enter a valid age.',
    }


class PatientForm(FormModel):
    """Walk-in patient of the doctor desk"""

    name: str = Field(min_length=2)
    age: int = Field(ge=1)
    phone: str = Field(min_length=10)
    address: str = Field(min_length=5)

    error_messages = {
        'name': 'Name must be at least 2 characters.',
        'age': 'Please enter a valid age.',
        'phone': 'Phone number must be at least 10 digits.',
        'address': 'Address is required.',
    }


class WalkInForm(PatientForm):
    """Walk-in patient booked together with the visit"""

    reasonForVisit: str = Field(min_length=5)
    appointmentDate: datetime

    error_messages = {
        **PatientForm.error_messages,
        'reasonForVisit': DoctorAppointmentForm.error_messages['reasonForVisit'],
        'appointmentDate': DoctorAppointmentForm.error_messages['appointmentDate'],
    }

    check_date = field_validator('appointmentDate')(future_datetime)

    def to_payload(self):
        payload = self.model_dump(mode='json')
        payload['appointmentDate'] = utc_timestamp(self.appointmentDate)
        return payload


# --- Eye tests --------------------------------------------------------------

class Measurement(FormModel):
    sph: float = 0
    cyl: Optional[float] = None
    axis: Optional[int] = None
    add: Optional[float] = None
    vision: Optional[str] = None

    error_messages = {
        'sph': 'Enter a number.',
        'cyl': 'Enter a number.',
        'axis': 'Enter a whole number.',
        'add': 'Enter a number.',
    }

    @field_validator('sph', mode='before')
    @classmethod
    def sph_default(cls, value):
        return 0 if value is None else value


class PersonalStep(FormModel):
    email: EmailStr
    name: str = Field(min_length=2)
    phone: str = Field(min_length=10)
    address: Optional[str] = None
    age: Optional[int] = Field(default=None, gt=0)

    error_messages = {
        'email': 'Invalid email address',
        'name': 'Name is required',
        'phone': 'Phone number is required',
        'age': 'Please enter a valid age.',
    }


class PastPersonalStep(PastUserRecordForm):
    pass


class MeasurementsStep(FormModel):
    dvRightEye: Measurement = Field(default_factory=Measurement)
    dvLeftEye: Measurement = Field(default_factory=Measurement)
    nvRightEye: Measurement = Field(default_factory=Measurement)
    nvLeftEye: Measurement = Field(default_factory=Measurement)
    imRightEye: Measurement = Field(default_factory=Measurement)
    imLeftEye: Measurement = Field(default_factory=Measurement)


class DistanceNearStep(FormModel):
    dvRightEye: Measurement = Field(default_factory=Measurement)
    dvLeftEye: Measurement = Field(default_factory=Measurement)
    nvRightEye: Measurement = Field(default_factory=Measurement)
    nvLeftEye: Measurement = Field(default_factory=Measurement)


class IntermediateStep(FormModel):
    imRightEye: Measurement = Field(default_factory=Measurement)
    imLeftEye: Measurement = Field(default_factory=Measurement)


class DetailsStep(FormModel):
    frame: Optional[str] = None
    lens: Optional[str] = None
    notes: Optional[str] = None
    bookingDate: date
    deliveryDate: date

    error_messages = {
        'bookingDate': 'Booking date is required.',
        'deliveryDate': 'Delivery date is required.',
    }


class DatedDetailsStep(DetailsStep):
    testDate: date

    error_messages = {
        **DetailsStep.error_messages,
        'testDate': 'Test date is required.',
    }


# --- Helpers ------------------------------------------------------------------

def _field_key(error):
    ctx = error.get('ctx') or {}
    if ctx.get('field'):
        return ctx['field']
    return '.'.join(str(part) for part in error.get('loc', ())) or '__all__'


def _error_text(model, error, key):
    if error.get('type') == 'form':
        return error['msg']
    messages = model.error_messages
    top = key.split('.')[0]
    if key in messages:
        return messages[key]
    if top in messages and '.' not in key:
        return messages[top]
    leaf = key.rsplit('.', 1)[-1]
    nested = _nested_messages(model, top)
    if leaf in nested:
        return nested[leaf]
    return error.get('msg', 'Invalid value')


def _nested_messages(model, field_name):
    field = model.model_fields.get(field_name)
    annotation = getattr(field, 'annotation', None)
    if isinstance(annotation, type) and issubclass(annotation, FormModel):
        return annotation.error_messages
    return {}


def validate_form(model, data):
    """Validate submitted data against a schema

    Returns (instance, {}) on success and (None, errors) otherwise, where
    errors maps a field name (dotted for nested fields) to its first message.
    """
    try:
        return model.model_validate(data), {}
    except ValidationError as e:
        errors = {}
        for error in e.errors():
            key = _field_key(error)
            errors.setdefault(key, _error_text(model, error, key))
        return None, errors


def form_data(form, lists=()):
    """Turn a request form into a plain dict

    Dotted names (``dvRightEye.sph``) become nested dicts; names listed in
    ``lists`` keep every submitted value.
    """
    data = {}
    for key in form.keys():
        value = form.getlist(key) if key in lists else form.get(key)
        if '.' in key:
            parent, child = key.split('.', 1)
            group = data.setdefault(parent, {})
            if not isinstance(group, dict):
                abort(400, f'Field {parent} was sent both as a value and as a group')
            group[child] = value
        elif isinstance(data.get(key), dict):
            abort(400, f'Field {key} was sent both as a value and as a group')
        else:
            data[key] = value
    for key in lists:
        data.setdefault(key, [])
    data.pop('csrf_token', None)
    return data
