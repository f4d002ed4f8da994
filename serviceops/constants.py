import calendar

MONTH_LABELS = [
    "",
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

# Day-of-week numbering used in storage: 0=Sunday .. 6=Saturday
DAY_LABELS = {0: "Sun", 1: "Mon", 2: "Tue", 3: "Wed", 4: "Thu", 5: "Fri", 6: "Sat"}

WEEKDAYS = [1, 2, 3, 4, 5]


def format_month(year: int, month: int) -> str:
    if not 1 <= month <= 12:
        return f"{month}/{year}"
    return f"{MONTH_LABELS[month]} {year}"


def previous_month(year: int, month: int) -> tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]
