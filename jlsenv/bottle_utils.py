# Copyright (C) 2024 jlsenv contributors
#
# This file is part of jlsenv.
#
# jlsenv is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# jlsenv is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with jlsenv.  If not, see <http://www.gnu.org/licenses/>.

import bottle

from jlsenv.utils import ToUnicode


# Bottle stores header values as unicode, and anything else ends up in the
# depths of the WSGI server as a traceback.
def SetResponseHeader( name, value ):
  bottle.response.set_header( ToUnicode( name ), ToUnicode( value ) )
