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
import json
import platform
import sys
from bottle import request

from jlsenv import responses, server_state, user_options_store
from jlsenv.responses import ( BuildDebugInfoResponse,
                               BuildDisplayMessageResponse,
                               BuildExceptionResponse,
                               BuildRequirementsResponse,
                               BuildRuntimeData,
                               DebugInfoItem )
from jlsenv.bottle_utils import SetResponseHeader
from jlsenv.utils import LOGGER, StartThread


# num bytes for the request body buffer; request.json only works if the request
# size is less than this
bottle.Request.MEMFILE_MAX = 1024 * 1024

_server_state = None
app = bottle.Bottle()
wsgi_server = None


@app.get( '/healthy' )
def GetHealthy():
  LOGGER.info( 'Received health request' )
  return _JsonResponse( True )


@app.get( '/ready' )
def GetReady():
  LOGGER.info( 'Received ready request' )
  return _JsonResponse( _server_state is not None )


@app.post( '/resolve_requirements' )
def ResolveRequirements():
  LOGGER.info( 'Received resolve requirements request' )
  request_data = _RequestData()

  requirements = _server_state.last_requirements
  if requirements is None or request_data.get( 'force' ):
    requirements = _server_state.ResolveRequirements()

  return _JsonResponse( BuildRequirementsResponse( requirements ) )


@app.post( '/list_jdks' )
def ListJdks():
  LOGGER.info( 'Received list JDKs request' )
  request_data = _RequestData()
  jdks = _server_state.ListJdks( bool( request_data.get( 'force' ) ) )

  return _JsonResponse( [ BuildRuntimeData( jdk ) for jdk in jdks ] )


@app.post( '/lombok/jvm_args' )
def LombokJvmArgs():
  LOGGER.info( 'Received Lombok JVM arguments request' )
  request_data = _RequestData()
  jvm_args = request_data.get( 'jvm_args' )
  if jvm_args is None:
    jvm_args = _server_state.user_options[ 'java_jdtls_jvm_args' ]

  lombok = _server_state.lombok
  with _server_state.Lock():
    if lombok.IsLombokSupportEnabled():
      jvm_args = lombok.AddLombokParam( jvm_args )

    return _JsonResponse( {
      'jvm_args': list( jvm_args ),
      'active_path': lombok.active_path,
      'is_extension_lombok': lombok.is_extension_lombok,
    } )


@app.post( '/lombok/check_dependency' )
def LombokCheckDependency():
  LOGGER.info( 'Received Lombok dependency check request' )
  request_data = _RequestData()
  classpaths = request_data.get( 'classpaths', [] )
  _ValidateClasspaths( classpaths )

  lombok = _server_state.lombok
  with _server_state.Lock():
    events = lombok.CheckLombokDependency( classpaths )
    return _JsonResponse( {
      'events': events,
      'status': lombok.status,
    } )


@app.post( '/lombok/configure' )
def LombokConfigure():
  LOGGER.info( 'Received Lombok configure request' )
  request_data = _RequestData()

  with _server_state.Lock():
    # The selection only answers the prompt of this request.
    _server_state.host.AnswerNextPrompt( request_data.get( 'selection' ) )
    try:
      message = _server_state.lombok.ConfigureLombokVersion()
    finally:
      _server_state.host.AnswerNextPrompt( None )

  return _JsonResponse( BuildDisplayMessageResponse( message ) )


@app.post( '/lombok/info' )
def LombokInfo():
  LOGGER.info( 'Received Lombok info request' )
  lombok = _server_state.lombok
  with _server_state.Lock():
    return _JsonResponse( {
      'enabled': lombok.IsLombokSupportEnabled(),
      'imported': lombok.IsLombokImported(),
      'active': lombok.IsLombokActive(),
      'version': lombok.GetLombokVersion(),
      'is_extension_lombok': lombok.is_extension_lombok,
      'project_lombok_path': lombok.project_lombok_path,
      'status': lombok.status,
    } )


@app.post( '/receive_messages' )
def ReceiveMessages():
  # The client polls this regularly; everything queued since the last poll is
  # returned at once.
  return _JsonResponse( _server_state.host.PendingMessages() )


@app.post( '/debug_info' )
def DebugInfo():
  LOGGER.info( 'Received debug info request' )

  requirements = _server_state.last_requirements
  lombok = _server_state.lombok
  items = [
    DebugInfoItem( 'Workspace state',
                   _server_state.workspace_state.state_file ),
    DebugInfoItem( 'Lombok jar', lombok.active_path ),
  ]
  if requirements:
    items = [
      DebugInfoItem( 'Tooling JDK', requirements.tooling_jre ),
      DebugInfoItem( 'Tooling JDK version', requirements.tooling_jre_version ),
      DebugInfoItem( 'Project JDK', requirements.java_home ),
      DebugInfoItem( 'Project JDK version', requirements.java_version ),
    ] + items

  response = {
    'python': {
      'executable': sys.executable,
      'version': platform.python_version()
    },
    'java': BuildDebugInfoResponse( 'Java', items ),
  }

  return _JsonResponse( response )


@app.post( '/shutdown' )
def Shutdown():
  LOGGER.info( 'Received shutdown request' )
  ServerShutdown()

  return _JsonResponse( True )


# The type of the param is Bottle.HTTPError
def ErrorHandler( httperror ):
  if isinstance( httperror.exception, responses.JavaRequirementError ):
    LOGGER.error( 'Java requirements not met: %s', httperror.exception )
  return _JsonResponse( BuildExceptionResponse( httperror.exception,
                                                httperror.traceback ) )


# For every error Bottle encounters it will use this as the default handler
app.default_error_handler = ErrorHandler


def _RequestData():
  return request.json or {}


def _ValidateClasspaths( classpaths ):
  """|classpaths| must hold one list of classpath entries per project."""
  if ( not isinstance( classpaths, list ) or
       not all( isinstance( project, list ) and
                all( isinstance( entry, str ) for entry in project )
                for project in classpaths ) ):
    raise responses.ServerError(
      'classpaths must be a list with one list of classpath entries per '
      'project' )


def _JsonResponse( data ):
  SetResponseHeader( 'Content-Type', 'application/json' )
  return json.dumps( data, default = _UniversalSerialize )


def _UniversalSerialize( obj ):
  try:
    serialized = obj.__dict__.copy()
    serialized[ 'TYPE' ] = type( obj ).__name__
    return serialized
  except AttributeError:
    return str( obj )


def ServerShutdown():
  def Terminator():
    if wsgi_server:
      wsgi_server.Shutdown()

  # Use a separate thread to let the server send the response before shutting
  # down.
  StartThread( Terminator )


def ServerCleanup():
  if _server_state:
    _server_state.Shutdown()


def UpdateUserOptions( options ):
  global _server_state

  if not options:
    return

  user_options_store.SetAll( options )
  _server_state = server_state.ServerState( user_options_store.GetAll() )
