from flask import Flask, request, render_template_string, url_for, make_response
from markupsafe import Markup, escape
from dotenv import load_dotenv
import calendar
import logging
import os

from calendar_design import calendar_design, current_date
from forms import CalendarForm


load_dotenv()

logging.basicConfig(level=os.getenv('LOG_LEVEL', 'INFO'), format='%(asctime)s %(levelname)s: %(message)s')


app = Flask(__name__)
app.config['SECRET_KEY'] = os.getenv('SECRET_KEY', 'dev')
app.config['CALENDAR_TIME_ZONE'] = os.getenv('CALENDAR_TIME_ZONE')
app.config['CALENDAR_FIRST_DAY_OF_WEEK'] = int(os.getenv('CALENDAR_FIRST_DAY_OF_WEEK', 0))
app.config['CALENDAR_ACCESSIBLE'] = os.getenv('CALENDAR_ACCESSIBLE', 'false').lower() in ('1', 'true', 'yes')


PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <title>{{ month_name }} {{ year }}</title>
  <style>
    .calendar .otherMonth { color: #aaa; }
    .calendar .weekendDay { background: #f3f3f3; }
    .calendar .today { font-weight: bold; }
    .calendar .hidden { position: absolute; left: -9999px; }
  </style>
</head>
<body>
  <h1>{{ year }}</h1>
  {{ calendar }}
</body>
</html>
"""


def adjacent_months(year, month):
    prev_year, prev_month = (year, month - 1) if month > 1 else (year - 1, 12)
    next_year, next_month = (year, month + 1) if month < 12 else (year + 1, 1)
    return (prev_year, prev_month), (next_year, next_month)


def calendar_options():
    """Build calendar options from the query string, falling back to the current month."""
    today = current_date(app.config['CALENDAR_TIME_ZONE'])
    form = CalendarForm(formdata=request.args)

    if not form.validate():
        logging.warning(f"Invalid calendar query {dict(request.args)}: {form.errors}")
        year, month = today.year, today.month
        first_day_of_week = app.config['CALENDAR_FIRST_DAY_OF_WEEK']
        accessible = app.config['CALENDAR_ACCESSIBLE']
    else:
        year = form.year.data or today.year
        month = form.month.data or today.month
        first_day_of_week = form.first_day_of_week.data
        if first_day_of_week is None:
            first_day_of_week = app.config['CALENDAR_FIRST_DAY_OF_WEEK']
        accessible = app.config['CALENDAR_ACCESSIBLE']
        if 'accessible' in request.args:
            accessible = form.accessible.data

    (prev_year, prev_month), (next_year, next_month) = adjacent_months(year, month)
    link = Markup('<a href="{}">{}</a>')

    return {
        'year': year,
        'month': month,
        'first_day_of_week': first_day_of_week,
        'accessible': accessible,
        'time_zone': app.config['CALENDAR_TIME_ZONE'],
        'previous_month_text': link.format(
            url_for('month_page', year=prev_year, month=prev_month, first_day_of_week=first_day_of_week),
            Markup('&laquo; ') + escape(calendar.month_abbr[prev_month])),
        'next_month_text': link.format(
            url_for('month_page', year=next_year, month=next_month, first_day_of_week=first_day_of_week),
            escape(calendar.month_abbr[next_month]) + Markup(' &raquo;')),
    }


@app.route('/')
@app.route('/calendar')
def month_page():
    options = calendar_options()
    logging.debug(f"Serving calendar page for {options['year']}-{options['month']:02d}")
    return render_template_string(
        PAGE_TEMPLATE,
        calendar=Markup(calendar_design(options)),
        year=options['year'],
        month_name=calendar.month_name[options['month']],
    )


@app.route('/calendar/fragment')
def month_fragment():
    options = calendar_options()
    response = make_response(calendar_design(options))
    response.headers['Content-Type'] = 'text/html; charset=utf-8'
    return response


if __name__ == '__main__':
    app.run(debug=os.getenv('FLASK_DEBUG') == '1', port=int(os.getenv('PORT', 5000)))
