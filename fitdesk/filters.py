from fitdesk.utils.formatters import format_currency, format_date_pt, format_number


def register_filters(app):
    """Register the pt-PT formatters as Jinja2 filters."""
    app.jinja_env.filters['currency'] = format_currency
    app.jinja_env.filters['number'] = format_number
    app.jinja_env.filters['date_pt'] = format_date_pt
