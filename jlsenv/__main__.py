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

import argparse
import atexit
import json
import logging
import signal
import sys

from jlsenv import handlers, responses, server_state, user_options_store, utils
from jlsenv.utils import OpenForStdHandle, ReadFile
from jlsenv.wsgi_server import StoppableWSGIServer


# We manually call sys.exit() on SIGTERM and SIGINT so that atexit handlers are
# properly executed.
def SetUpSignalHandler():
  def SignalHandler( signum, frame ):
    sys.exit()

  for sig in [ signal.SIGTERM,
               signal.SIGINT ]:
    signal.signal( sig, SignalHandler )


def CleanUpLogfiles( stdout, stderr, keep_logfiles ):
  # We reset stderr & stdout, just in case something tries to use them
  if stderr:
    tmp = sys.stderr
    sys.stderr = sys.__stderr__
    tmp.close()
  if stdout:
    tmp = sys.stdout
    sys.stdout = sys.__stdout__
    tmp.close()

  if not keep_logfiles:
    if stderr:
      utils.RemoveIfExists( stderr )
    if stdout:
      utils.RemoveIfExists( stdout )


def ParseArguments( args = None ):
  parser = argparse.ArgumentParser(
    prog = 'jlsenv',
    description = 'Find the Java runtimes and the Lombok jar for the Java '
                  'language server.' )
  parser.add_argument( '--host', type = str, default = '127.0.0.1',
                       help = 'server hostname' )
  # Default of 0 will make the OS pick a free port for us
  parser.add_argument( '--port', type = int, default = 0,
                       help = 'server port' )
  parser.add_argument( '--log', type = str, default = 'info',
                       help = 'log level, one of '
                              '[debug|info|warning|error|critical]' )
  parser.add_argument( '--options_file', type = str, default = None,
                       help = 'file with user options, in JSON format' )
  parser.add_argument( '--stdout', type = str, default = None,
                       help = 'optional file to use for stdout' )
  parser.add_argument( '--stderr', type = str, default = None,
                       help = 'optional file to use for stderr' )
  parser.add_argument( '--keep_logfiles', action = 'store_true', default = None,
                       help = 'retain logfiles after the server exits' )
  parser.add_argument( '--resolve', action = 'store_true', default = False,
                       help = 'print the resolved Java requirements as JSON '
                              'and exit' )
  return parser.parse_args( args )


def SetupLogging( log_level ):
  numeric_level = getattr( logging, log_level.upper(), None )
  if not isinstance( numeric_level, int ):
    raise ValueError( 'Invalid log level: %s' % log_level )

  # Has to be called before any call to logging.getLogger()
  logging.basicConfig( format = '%(asctime)s - %(levelname)s - %(message)s',
                       level = numeric_level )


def SetupOptions( options_file ):
  options = user_options_store.DefaultOptions()
  if options_file:
    options.update( json.loads( ReadFile( options_file ) ) )
  user_options_store.SetAll( options )
  return options


def PrintRequirements():
  state = server_state.ServerState( user_options_store.GetAll() )
  try:
    requirements = state.ResolveRequirements()
  except responses.JavaRequirementError as error:
    json.dump( {
      'message': str( error ),
      'label': error.label,
      'command': error.command,
      'command_param': error.command_param,
    }, sys.stdout, indent = 2 )
    print()
    return 1

  json.dump( responses.BuildRequirementsResponse( requirements ),
             sys.stdout,
             indent = 2 )
  print()
  return 0


def Main():
  args = ParseArguments()

  if args.stdout is not None:
    sys.stdout = OpenForStdHandle( args.stdout )
  if args.stderr is not None:
    sys.stderr = OpenForStdHandle( args.stderr )

  SetupLogging( args.log )
  options = SetupOptions( args.options_file )

  if args.resolve:
    sys.exit( PrintRequirements() )

  handlers.UpdateUserOptions( options )
  SetUpSignalHandler()
  # Functions registered by the atexit module are called at program termination
  # in last in, first out order.
  atexit.register( CleanUpLogfiles, args.stdout,
                                    args.stderr,
                                    args.keep_logfiles )
  atexit.register( handlers.ServerCleanup )
  handlers.wsgi_server = StoppableWSGIServer( handlers.app,
                                              host = args.host,
                                              port = args.port )
  handlers.wsgi_server.Run()


if __name__ == "__main__":
  Main()
