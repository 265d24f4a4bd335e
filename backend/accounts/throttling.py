import re

from rest_framework.throttling import SimpleRateThrottle

_RATE_PATTERN = re.compile(r'^(\d+)/(\d*)([smhd])')
_PERIODS = {'s': 1, 'm': 60, 'h': 3600, 'd': 86400}


class WindowedIPRateThrottle(SimpleRateThrottle):
    """
    Per-client-IP throttle whose rate may use a multiplied period, e.g.
    ``"5/15m"`` for five requests per fifteen minutes.
    """

    def parse_rate(self, rate):
        if rate is None:
            return (None, None)
        match = _RATE_PATTERN.match(rate)
        if match is None:
            raise ValueError(f"Invalid throttle rate: {rate!r}")
        num, multiplier, unit = match.groups()
        return int(num), int(multiplier or 1) * _PERIODS[unit]

    def get_cache_key(self, request, view):
        return self.cache_format % {
            'scope': self.scope,
            'ident': self.get_ident(request),
        }


class LoginRateThrottle(WindowedIPRateThrottle):
    scope = 'login'

