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

from wsgiref.simple_server import WSGIServer, WSGIRequestHandler
from socketserver import ThreadingMixIn

from jlsenv.utils import LOGGER


class QuietRequestHandler( WSGIRequestHandler ):
  # Requests are already logged by the handlers.
  def log_message( self, format, *args ):
    LOGGER.debug( format, *args )


class StoppableWSGIServer( ThreadingMixIn, WSGIServer ):
  daemon_threads = False

  def __init__( self, app, host, port ):
    super().__init__( ( host, port ), QuietRequestHandler )
    self.set_app( app )


  def Run( self ):
    LOGGER.info( 'Serving on http://%s:%s', *self.server_address[ : 2 ] )
    try:
      self.serve_forever()
    finally:
      self.server_close()


  def Shutdown( self ):
    # Blocks until serve_forever returns; must not be called from the serving
    # thread.
    self.shutdown()
