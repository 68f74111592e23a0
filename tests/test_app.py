from datetime import date

import calendar
import pytest
from bs4 import BeautifulSoup

from app import adjacent_months, app


@pytest.fixture
def client():
    app.config['TESTING'] = True
    app.config['CALENDAR_TIME_ZONE'] = None
    app.config['CALENDAR_FIRST_DAY_OF_WEEK'] = 0
    app.config['CALENDAR_ACCESSIBLE'] = False
    with app.test_client() as client:
        yield client


def get_soup(client, url):
    response = client.get(url)
    assert response.status_code == 200
    return BeautifulSoup(response.get_data(as_text=True), 'html.parser')


def navigation_links(soup):
    return [a['href'] for a in soup.find('table').find('thead').find_all('a')]


def test_adjacent_months_wrap_years():
    assert adjacent_months(2006, 8) == ((2006, 7), (2006, 9))
    assert adjacent_months(2006, 1) == ((2005, 12), (2006, 2))
    assert adjacent_months(2006, 12) == ((2006, 11), (2007, 1))


def test_month_page(client):
    soup = get_soup(client, '/calendar?year=2006&month=8')
    assert soup.find('title').get_text() == 'August 2006'
    assert soup.find('td', class_='monthName').get_text() == 'August'
    assert soup.find('td', class_='monthName')['colspan'] == '5'

    previous_link, next_link = navigation_links(soup)
    assert 'year=2006' in previous_link and 'month=7' in previous_link
    assert 'year=2006' in next_link and 'month=9' in next_link


def test_navigation_wraps_to_next_year(client):
    soup = get_soup(client, '/calendar?year=2006&month=12')
    previous_link, next_link = navigation_links(soup)
    assert 'month=11' in previous_link
    assert 'year=2007' in next_link and 'month=1' in next_link


def test_index_shows_current_month(client):
    soup = get_soup(client, '/')
    assert soup.find('td', class_='monthName').get_text() == calendar.month_name[date.today().month]


def test_invalid_query_falls_back_to_current_month(client):
    soup = get_soup(client, '/calendar?year=2006&month=13')
    assert soup.find('td', class_='monthName').get_text() == calendar.month_name[date.today().month]

    soup = get_soup(client, '/calendar?year=abc&month=8')
    assert soup.find('td', class_='monthName').get_text() == calendar.month_name[date.today().month]


@pytest.mark.parametrize('query', ['year=1&month=1', 'year=9999&month=12'])
def test_out_of_range_years_fall_back_to_current_month(client, query):
    soup = get_soup(client, f'/calendar?{query}')
    assert soup.find('td', class_='monthName').get_text() == calendar.month_name[date.today().month]


def test_first_day_of_week_query(client):
    soup = get_soup(client, '/calendar?year=2006&month=8&first_day_of_week=1')
    assert soup.find('tr', class_='dayName').find('abbr')['title'] == 'Monday'
    assert all('first_day_of_week=1' in link for link in navigation_links(soup))


def test_accessible_query(client):
    soup = get_soup(client, '/calendar?year=2006&month=8&accessible=y')
    assert soup.find('tbody').find('span', class_='hidden').get_text() == 'July'


def test_fragment(client):
    response = client.get('/calendar/fragment?year=2006&month=8')
    assert response.status_code == 200
    assert response.content_type.startswith('text/html')
    body = response.get_data(as_text=True)
    assert body.startswith('<table')
    assert body.endswith('</table>')


def test_accessible_default_from_config(client):
    app.config['CALENDAR_ACCESSIBLE'] = True
    soup = get_soup(client, '/calendar?year=2006&month=8')
    assert soup.find('tbody').find('span', class_='hidden') is not None


def test_accessible_query_overrides_config(client):
    app.config['CALENDAR_ACCESSIBLE'] = True
    soup = get_soup(client, '/calendar?year=2006&month=8&accessible=false')
    assert soup.find('tbody').find('span', class_='hidden') is None
