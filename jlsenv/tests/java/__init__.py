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

from hamcrest import contains_inanyorder, empty, has_entries, has_properties


def RuntimeMatcher( homedir, version, sources = None ):
  properties = { 'homedir': homedir, 'version': version }
  if sources is not None:
    properties[ 'sources' ] = ( contains_inanyorder( *sources ) if sources
                                else empty() )
  return has_properties( properties )


def RuntimeDataMatcher( homedir, version ):
  return has_entries( { 'homedir': homedir, 'version': version } )
