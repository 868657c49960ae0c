"""Time strings used in response headers and directory listings."""
import time
from email.utils import formatdate


def rfc822_time(thetime=None):
    """Sun, 06 Nov 1994 08:49:37 GMT"""
    return formatdate(thetime, usegmt=True)


def table_time(thetime):
    """01-May-2019 19:18, in local time"""
    return time.strftime("%d-%b-%Y %H:%M", time.localtime(thetime))
