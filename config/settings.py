import os

# Money precision (decimal places)
AMOUNT_PRECISION = 2

# Day counts used to estimate elapsed periods (monthly/yearly are approximate)
PERIOD_LENGTH_DAYS = {
    "daily": 1,
    "weekly": 7,
    "monthly": 30,
    "yearly": 365,
}

# Calendar window around today, in whole years
CALENDAR_YEARS_BACK = 2
CALENDAR_YEARS_FORWARD = 3

# Calendar grids start on Sunday (offset 0)
WEEK_STARTS_ON_SUNDAY = True

# Transactions may be backdated at most this many days
MAX_BACKDATE_DAYS = 7

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
LOG_FORMAT = os.getenv("LOG_FORMAT", "standard")
