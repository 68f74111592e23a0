from flask_wtf import FlaskForm
from wtforms import BooleanField, IntegerField, SelectField
from wtforms.validators import NumberRange, Optional

from calendar_design import day_names


class CalendarForm(FlaskForm):
    """Query arguments of the calendar pages (read from the URL, no CSRF)."""

    class Meta:
        csrf = False

    year = IntegerField('Year', validators=[
        Optional(),
        NumberRange(min=2, max=9998, message="Year must be between 2 and 9998.")
    ])
    month = IntegerField('Month', validators=[
        Optional(),
        NumberRange(min=1, max=12, message="Month must be between 1 and 12.")
    ])
    first_day_of_week = SelectField(
        'First day of week',
        coerce=int,
        choices=[(i, name) for i, name in enumerate(day_names(0))],
        validators=[Optional()],
    )
    accessible = BooleanField('Accessible')
