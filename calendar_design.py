import calendar
import copy
import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Union

import pytz
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.formatter import HTMLFormatter


class MissingArgument(ValueError):
    """Raised when a required calendar option (year or month) is absent."""

    def __init__(self, argument):
        super().__init__(f"No {argument} given")
        self.argument = argument


@dataclass(frozen=True)
class CalendarConfig:
    year: int
    month: int
    today: date
    table_class: str = 'calendar'
    month_name_class: str = 'monthName'
    other_month_class: str = 'otherMonth'
    day_name_class: str = 'dayName'
    day_class: str = 'day'
    abbrev: slice = field(default_factory=lambda: slice(0, 3))
    first_day_of_week: int = 0
    accessible: bool = False
    show_today: bool = True
    previous_month_text: Any = None
    next_month_text: Any = None
    month_header: bool = True
    # accepted for compatibility, the literal tokens below are what gets rendered
    weekend_class: str = 'weekend'
    today_class: str = 'today'
    output: dict = field(default_factory=dict)
    time_zone: Any = None


WEEKEND_TOKEN = 'weekendDay'
TODAY_TOKEN = 'today'

_OPTION_NAMES = {f.name for f in fields(CalendarConfig)} - {'today'}


def current_date(time_zone=None):
    """Return today's date, in `time_zone` (a pytz name or tzinfo) when given."""
    if time_zone is None:
        return date.today()
    if isinstance(time_zone, str):
        time_zone = pytz.timezone(time_zone)
    return datetime.now(time_zone).date()


def resolve_config(options, today=None):
    """Merge caller options over the defaults and capture today's date once.

    `today` is an optional zero-argument callable returning a date; without it
    the date is taken from the clock in the configured time zone.
    """
    if 'year' not in options:
        raise MissingArgument('year')
    if 'month' not in options:
        raise MissingArgument('month')

    unknown = set(options) - _OPTION_NAMES
    if unknown:
        logging.debug(f"Ignoring unknown calendar options: {sorted(unknown)}")

    for name, default in (('weekend_class', 'weekend'), ('today_class', 'today')):
        if options.get(name, default) != default:
            logging.warning(f"{name}={options[name]!r} is accepted but not applied to day cells")

    merged = {key: value for key, value in options.items() if key in _OPTION_NAMES}
    provider = today or (lambda: current_date(merged.get('time_zone')))
    return CalendarConfig(today=provider(), **merged)


# --- date range ---------------------------------------------------------------

@dataclass(frozen=True)
class DateRange:
    start: date
    end: date


@dataclass(frozen=True)
class GridDay:
    date: date
    in_month: bool


def weekday_number(day):
    """Sunday-based weekday (Sunday=0 ... Saturday=6)."""
    return (day.weekday() + 1) % 7


def start_of_week(day, first_day_of_week=0):
    return day - timedelta(days=(weekday_number(day) - first_day_of_week) % 7)


def end_of_week(day, first_day_of_week=0):
    return start_of_week(day, first_day_of_week) + timedelta(days=6)


def is_weekend(day):
    return day.weekday() >= 5


def calendar_start_date(year, month, first_day_of_week=0):
    return start_of_week(date(year, month, 1), first_day_of_week)


def calendar_end_date(year, month, first_day_of_week=0):
    last_day = calendar.monthrange(year, month)[1]
    return end_of_week(date(year, month, last_day), first_day_of_week)


def date_range(config):
    return DateRange(
        calendar_start_date(config.year, config.month, config.first_day_of_week),
        calendar_end_date(config.year, config.month, config.first_day_of_week),
    )


def grid_days(config):
    """Every day of the grid, in order, tagged with target-month membership."""
    span = date_range(config)
    for offset in range((span.end - span.start).days + 1):
        day = span.start + timedelta(days=offset)
        yield GridDay(day, (day.year, day.month) == (config.year, config.month))


def weeks(config):
    """Split the grid into consecutive 7-day rows."""
    days = list(grid_days(config))
    return [days[i:i + 7] for i in range(0, len(days), 7)]


# --- day names ----------------------------------------------------------------

def day_names(first_day_of_week=0):
    """Full weekday names, starting at the Sunday-based `first_day_of_week`."""
    # calendar.Calendar counts weekdays from Monday
    week = calendar.Calendar(firstweekday=(first_day_of_week + 6) % 7)
    return [calendar.day_name[i] for i in week.iterweekdays()]


# --- day callback results -----------------------------------------------------

@dataclass(frozen=True)
class Pair:
    text: Any
    attributes: Optional[dict]


@dataclass(frozen=True)
class Text:
    text: Any


@dataclass(frozen=True)
class Empty:
    pass


EMPTY = Empty()

DayResult = Union[Pair, Text, Empty]


def as_day_result(value) -> DayResult:
    """Normalize whatever a day callback returned into Pair, Text or Empty."""
    if isinstance(value, (Pair, Text, Empty)):
        return value
    if value is None:
        return EMPTY
    if isinstance(value, (tuple, list)):
        if len(value) == 2:
            return Pair(*value)
        if len(value) == 1:
            return Text(value[0])
        if not value:
            return EMPTY
        raise TypeError(f"Day callback returned {len(value)} values, expected (text, attributes)")
    return Text(value)


@dataclass(frozen=True)
class CellResult:
    text: Any
    attributes: dict
    class_list: list


# --- rendering ----------------------------------------------------------------

class CalendarDesign(calendar.HTMLCalendar):
    """Builds the calendar table for one resolved configuration.

    The day callback receives a `datetime.date` and may return
    `(text, attributes)`, a bare text, or None; see `as_day_result`.
    """

    def __init__(self, config: CalendarConfig, day_callback: Optional[Callable] = None):
        # HTMLCalendar counts weekdays from Monday
        super().__init__(firstweekday=(config.first_day_of_week + 6) % 7)
        self.config = config
        self.day_callback = day_callback
        self.cssclass_month = config.table_class
        self.cssclass_month_head = config.month_name_class
        self.cssclass_noday = config.other_month_class
        self.soup = BeautifulSoup('', 'html.parser')

    def to_html(self):
        """The configured month as a table string.

        The inherited `formatmonth`/`formatyear` keep the plain `HTMLCalendar` output.
        """
        return serialize(self.render_calendar(), self.config.output)

    def render_calendar(self):
        logging.debug(f"Rendering calendar for {self.config.year}-{self.config.month:02d}")
        table = self.soup.new_tag('table', attrs={
            'border': '0',
            'cellpadding': '0',
            'cellspacing': '0',
            'class': self.cssclass_month,
        })
        table.append(self.render_header())
        table.append(self.render_body())
        return table

    def render_header(self):
        thead = self.soup.new_tag('thead')
        if self.config.month_header:
            thead.append(self.render_month_names())
        thead.append(self.render_day_names())
        return thead

    def render_month_names(self):
        self._colspan = 7
        row = self.soup.new_tag('tr')
        for cell in (
            self.render_month_navigation(self.config.previous_month_text),
            self.render_month_name(),
            self.render_month_navigation(self.config.next_month_text),
        ):
            if cell is not None:
                row.append(cell)
        return row

    def render_month_navigation(self, navigation_text):
        if navigation_text is None:
            return None
        self._colspan -= 2
        cell = self.soup.new_tag('td', attrs={'colspan': '2'})
        self._append_content(cell, navigation_text)
        return cell

    def render_month_name(self):
        cell = self.soup.new_tag('td', attrs={
            'class': self.cssclass_month_head,
            'colspan': str(self._colspan),
        })
        cell.string = calendar.month_name[self.config.month]
        return cell

    def render_day_names(self):
        row = self.soup.new_tag('tr', attrs={'class': self.config.day_name_class})
        for weekday in self.iterweekdays():
            row.append(self.render_day_name(calendar.day_name[weekday]))
        return row

    def render_day_name(self, day_name):
        abbreviated = day_name[self.config.abbrev]
        cell = self.soup.new_tag('th', attrs={'scope': 'col'})
        if abbreviated != day_name:
            abbr = self.soup.new_tag('abbr', attrs={'title': day_name})
            abbr.string = abbreviated
            cell.append(abbr)
        else:
            cell.string = day_name
        return cell

    def render_body(self):
        tbody = self.soup.new_tag('tbody')
        for week in weeks(self.config):
            tbody.append(self.render_week(week))
        return tbody

    def render_week(self, week):
        row = self.soup.new_tag('tr')
        for grid_day in week:
            row.append(self.render_day(grid_day))
        return row

    def render_day(self, grid_day):
        cell_result = self.day_attrs(grid_day)
        cell = self.soup.new_tag('td', attrs=cell_result.attributes)
        self._append_content(cell, cell_result.text)
        if self.config.accessible and not grid_day.in_month:
            hidden = self.soup.new_tag('span', attrs={'class': 'hidden'})
            hidden.string = calendar.month_name[grid_day.date.month]
            cell.append(hidden)
        return cell

    def day_attrs(self, grid_day):
        """Resolve the text, attributes and class list of one day cell."""
        day = grid_day.date
        result = EMPTY
        if self.day_callback is not None:
            result = as_day_result(self.day_callback(day))

        text = getattr(result, 'text', None)
        if text is None:
            text = day.day
        attrs = {key: str(value) for key, value in (getattr(result, 'attributes', None) or {}).items()}

        class_list = [
            attrs.get('class') or self.config.day_class,
            self.cssclass_noday if not grid_day.in_month else None,
            WEEKEND_TOKEN if is_weekend(day) else None,
            TODAY_TOKEN if self.config.show_today and day == self.config.today else None,
        ]
        class_list = [name for name in class_list if name]
        attrs['class'] = ' '.join(class_list)
        return CellResult(text, attrs, class_list)

    def _append_content(self, element, content):
        if isinstance(content, (Tag, NavigableString)):
            # a caller may hand back the same tag for many days
            element.append(copy.copy(content))
        elif hasattr(content, '__html__'):
            fragment = BeautifulSoup(content.__html__(), 'html.parser')
            for child in list(fragment.contents):
                element.append(child.extract())
        else:
            element.append(NavigableString(str(content)))


def indented_formatter(formatter, indent):
    """Copy a formatter (name or instance) with another indentation."""
    if isinstance(formatter, str):
        formatter = HTMLFormatter.REGISTRY[formatter]
    return HTMLFormatter(
        entity_substitution=formatter.entity_substitution,
        void_element_close_prefix=formatter.void_element_close_prefix,
        cdata_containing_tags=formatter.cdata_containing_tags,
        empty_attributes_are_booleans=formatter.empty_attributes_are_booleans,
        indent=indent,
    )


def serialize(element, output=None):
    """Turn a rendered tag into text using the `output` options."""
    output = output or {}
    formatter = output.get('formatter', 'minimal')
    if 'indent' in output:
        return element.prettify(formatter=indented_formatter(formatter, output['indent']))
    if output.get('pretty'):
        return element.prettify(formatter=formatter)
    return element.decode(formatter=formatter)


def calendar_design(options, day_callback=None, today=None):
    """Render a month calendar as an HTML table.

    `options` must contain `year` and `month`; every other key is optional
    (see `CalendarConfig` for the defaults). For example::

        calendar_design({'year': 2006, 'month': 8, 'abbrev': slice(None)})

        def special(d):
            if d in special_days:
                return d.day, {'class': 'specialDay'}

        calendar_design({'year': 2005, 'month': 5}, special)
    """
    config = resolve_config(options, today=today)
    return CalendarDesign(config, day_callback).to_html()
