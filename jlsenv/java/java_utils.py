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

import os

from jlsenv import utils
from jlsenv.utils import re

JAVAC_FILENAME = utils.ExecutableName( 'javac' )
JAVA_FILENAME = utils.ExecutableName( 'java' )

MAJOR_VERSION_REGEX = re.compile( r'\d+' )

# Any of these existing under a runtime's home means it is a full JDK, not
# just a JRE.
JDK_MARKER_FILES = [
  os.path.join( 'lib', 'rt.jar' ),
  os.path.join( 'jre', 'lib', 'rt.jar' ), # Java 8
  os.path.join( 'lib', 'jrt-fs.jar' ), # Java 9+
]

JDK_DOWNLOAD_URL = (
  'https://developers.redhat.com/products/openjdk/download/'
  '?sc_cid=701f2000000RWTnAAO' )
MAC_JDK_DOWNLOAD_URL = 'https://adoptopenjdk.net/'


def ParseMajorVersion( version ):
  """Returns the major version number from a Java version string such as
  '17.0.2' or '1.8.0_292', or 0 if there is none."""
  if not version:
    return 0

  # Ignore '1.' prefix for legacy Java versions
  if version.startswith( '1.' ):
    version = version[ 2: ]

  match = MAJOR_VERSION_REGEX.search( version )
  if match:
    return int( match.group( 0 ) )
  return 0


def JavacPath( java_home ):
  return os.path.join( java_home, 'bin', JAVAC_FILENAME )


def JavaPath( java_home ):
  return os.path.join( java_home, 'bin', JAVA_FILENAME )


def IsJdkHome( java_home ):
  return any( os.path.exists( os.path.join( java_home, marker ) )
              for marker in JDK_MARKER_FILES )


def GetJdkUrl():
  if utils.OnMac():
    return MAC_JDK_DOWNLOAD_URL
  return JDK_DOWNLOAD_URL
