# fmxml.py

# Copyright (c) 2006-2020, Christoph Gohlke
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# 3. Neither the name of the copyright holder nor the names of its
#    contributors may be used to endorse or promote products derived from
#    this software without specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""Access FileMaker(tm) Server databases via XML Web Publishing.

Fmxml is a Python library to find, create, edit and delete records in
FileMaker(tm) Server databases through the fmresultset XML grammar of the
Web Publishing Engine. Field values are converted to Python types and
FileMaker error codes are raised as a hierarchy of exceptions.

"FileMaker" is a registered trademark of FileMaker Inc.

:License: BSD 3-Clause

:Version: 2026.10.19

Requirements
------------
* `CPython >= 3.6 <https://www.python.org>`_
* `lxml 4.2 <https://github.com/lxml/lxml>`_
* `FileMaker(tm) Server 9 or later <https://www.filemaker.com>`_ with
  XML Web Publishing enabled and the fmxml extended privilege granted

Revisions
---------
2026.10.19
    Parse the fmresultset grammar instead of FMPXMLRESULT.
    Coerce number, date, time, timestamp and container fields.
    Parse related record sets (portals).
    Raise FileMakerError subclasses by error code family.
    Add Server, Database and Layout objects.
    Add parsing of FMPXMLLAYOUT value lists and field controls.

References
----------
1. FileMaker Server Custom Web Publishing with XML.
   https://help.claris.com/archive/docs/18/en/fms18_cwp_xml.pdf

Examples
--------
>>> from fmxml import Server, FileMakerError, NoRecordsFoundError
>>> server = Server('filemaker.domain.com', account_name='web',
...                 password='secret')
>>> layout = server['Customers']['Details']
>>> # create a new record
>>> values = {'First Name': 'John', 'Last Name': 'Doe'}
>>> result = layout.create(values)  # doctest: +SKIP
>>> recid = result[0].record_id  # doctest: +SKIP
>>> # find and sort records
>>> result = layout.find({'Last Name': 'Doe'}, sort_field='First Name',
...                      max_records=5)  # doctest: +SKIP
>>> for record in result:  # doctest: +SKIP
...     print(record['first name'], record['LAST NAME'])
John Doe
>>> # edit a record
>>> record = result[0]  # doctest: +SKIP
>>> record['First Name'] = 'Jim'  # doctest: +SKIP
>>> record.save()  # doctest: +SKIP
>>> # delete record
>>> layout.delete(record.record_id)  # doctest: +SKIP
>>> # catch an exception
>>> try:  # doctest: +SKIP
...     layout.find({'Last Name': 'Doe'})
... except FileMakerError as exc:
...     print(exc)
FieldMissingError occurred: (FileMaker Error #102)
>>> print(build_error(401))
NoRecordsFoundError occurred: (FileMaker Error #401)
>>> translate_format('MM/dd/yyyy HH:mm:ss')
'%m/%d/%Y %H:%M:%S'

"""

import base64
import enum
import logging
import os
import re
import ssl
from collections.abc import Mapping, MutableMapping
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urljoin
from urllib.request import (
    HTTPRedirectHandler, HTTPSHandler, Request, build_opener
)

from lxml import etree

__version__ = '2026.10.19'

__all__ = (
    'Server', 'Database', 'Layout', 'ResultSet', 'Record', 'FMField',
    'FormatSet', 'FieldControl', 'LayoutInfo', 'CaseInsensitiveDict',
    'ErrorKind', 'classify_error', 'build_error', 'translate_format',
    'coerce', 'parse_record', 'parse_resultset', 'parse_layout',
    'expand_options',
    'FMError', 'CommunicationError', 'AuthenticationError', 'ParameterError',
    'ParseError', 'CoercionError', 'NumberFormatError', 'DateFormatError',
    'TimeFormatError', 'TimestampFormatError', 'FileMakerError',
    'UnknownError', 'FileMakerSystemError', 'MissingError',
    'RecordMissingError', 'FieldMissingError', 'ScriptMissingError',
    'LayoutMissingError', 'TableMissingError', 'SecurityError',
    'RecordAccessDeniedError', 'FieldCannotBeModifiedError',
    'FieldAccessIsDeniedError', 'ConcurrencyError', 'RecordInUseError',
    'TableInUseError', 'RecordModIdDoesNotMatchError', 'GeneralError',
    'NoRecordsFoundError', 'ValidationError', 'DateValidationError',
    'TimeValidationError', 'NumberValidationError', 'RangeValidationError',
    'UniqueValidationError', 'ExistingValidationError',
    'ValueListValidationError', 'ValidationCalculationError',
    'InvalidFindModeValueError', 'MaximumCharactersValidationError',
    'FileError', 'UnableToOpenFileError',
)

logger = logging.getLogger('fmxml')


class Server:
    """FileMaker Web Publishing Engine.

    Entry point to get Database objects by name and Layout objects
    from those. No request is sent until a Layout action is performed.

    """

    PATH = '/fmi/xml/fmresultset.xml'
    LAYOUT_PATH = '/fmi/xml/FMPXMLLAYOUT.xml'
    MAX_REDIRECTS = 10

    def __init__(self, host='localhost', port=None, ssl=True,
                 account_name='', password='', root_cert=True,
                 root_cert_name='', root_cert_path='/', raise_on_401=False,
                 warn_on_redirect=True, timeout=None):
        """Specify location of and credentials for the Web Publishing Engine.

        Parameters
        ----------
        host : str
            IP address or domain name of the Web Publishing Engine.
        port : int
            TCP/IP port number (default: 443 if ssl else 80).
        ssl : bool
            Connect via HTTPS (default) or HTTP.
        account_name : str
            Default account name for databases on this server.
        password : str
            Default password for databases on this server.
        root_cert : bool
            Verify the server certificate (default). If False, any
            certificate is accepted, e.g. a self-signed one.
        root_cert_name : str
            Optional name of a PEM file with certificate authorities to
            verify the server certificate against.
        root_cert_path : str
            Directory containing root_cert_name (default: '/').
        raise_on_401 : bool
            Raise NoRecordsFoundError if a find matches no records.
            By default, an empty ResultSet is returned instead.
        warn_on_redirect : bool
            Log a warning when the server redirects a request (default).
        timeout : float
            Optional timeout in seconds for blocking network operations.

        """
        self.host = str(host)
        self.ssl = bool(ssl)
        if port is None:
            port = 443 if self.ssl else 80
        self.port = int(port)
        self.account_name = str(account_name)
        self.password = str(password)
        self.root_cert = bool(root_cert)
        self.root_cert_name = str(root_cert_name)
        self.root_cert_path = str(root_cert_path)
        self.raise_on_401 = bool(raise_on_401)
        self.warn_on_redirect = bool(warn_on_redirect)
        self.timeout = timeout
        self._databases = CaseInsensitiveDict()

    @property
    def scheme(self):
        """Return 'https' or 'http'."""
        return 'https' if self.ssl else 'http'

    @property
    def base_url(self):
        """Return URL of server without path, used for container fields."""
        return f'{self.scheme}://{self.host}:{self.port}'

    def db(self, name):
        """Return Database object of given name.

        The server is not contacted. An invalid database name is only
        reported by the first action performed on one of its layouts.

        """
        try:
            return self._databases[name]
        except KeyError:
            database = Database(self, name)
            self._databases[name] = database
            return database

    __getitem__ = db

    def databases(self):
        """Return names of all databases accessible on server."""
        data = self.do_action(
            self.account_name, self.password, '-dbnames', []
        )
        return [r['DATABASE_NAME'] for r in self._parse(data)]

    def do_action(self, account_name, password, action, args, options=None,
                  path=None):
        """Submit raw action to Web Publishing Engine and return XML bytes.

        Parameters
        ----------
        account_name, password : str
            Credentials used for HTTP basic authentication.
        action : str
            FileMaker query command, e.g. '-find', '-findall', '-view'.
        args : dict or sequence of (str, str)
            Query parameters, e.g. {'-db': 'Customers', '-lay': 'Details'}.
        options : dict
            Keyword options translated by expand_options.
        path : str
            Path of XML grammar (default: Server.PATH).

        """
        if path is None:
            path = Server.PATH
        if isinstance(args, Mapping):
            args = args.items()
        params = list(args)
        params.extend(expand_options(options or {}))
        params.append((action, ''))

        url = self.base_url + path
        data = urlencode(params)
        logger.debug('%s?%s', url, data)
        content = self._fetch(url, data.encode('utf-8'), account_name,
                              password)
        logger.debug('response from %s:\n%s', url,
                     content.decode('utf-8', 'replace'))
        return content

    def _parse(self, data):
        """Return ResultSet from XML response."""
        return parse_resultset(data, raise_on_401=self.raise_on_401,
                               base_url=self.base_url)

    def _opener(self):
        """Return urllib opener that reports instead of follows redirects."""
        handlers = [_RedirectHandler()]
        if self.ssl:
            handlers.append(HTTPSHandler(context=self._ssl_context()))
        return build_opener(*handlers)

    def _ssl_context(self):
        """Return SSL context according to root certificate settings."""
        if not self.root_cert:
            context = ssl.create_default_context()
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
            return context
        if not self.root_cert_name:
            return ssl.create_default_context()
        cafile = os.path.join(self.root_cert_path, self.root_cert_name)
        if not os.path.isfile(cafile):
            raise ParameterError(
                f'root certificate file {cafile!r} is missing; '
                'set root_cert=False to disable certificate verification'
            )
        return ssl.create_default_context(cafile=cafile)

    def _fetch(self, url, data, account_name, password):
        """POST data to url and return response body.

        Redirects are followed here, up to MAX_REDIRECTS, so the form data
        is re-sent to the new location.

        """
        auth = f'{account_name}:{password}'.encode('utf-8')
        auth = 'Basic ' + base64.b64encode(auth).decode('ascii')
        opener = self._opener()

        for _ in range(Server.MAX_REDIRECTS + 1):
            request = Request(url, data)
            request.add_header('User-Agent', 'fmxml.py')
            request.add_header('Authorization', auth)
            try:
                fd = opener.open(request, timeout=self.timeout)
            except HTTPError as exc:
                location = exc.headers.get('Location') if exc.headers else None
                if exc.code in (301, 302, 303, 307, 308) and location:
                    exc.close()
                    newurl = urljoin(url, location)
                    if self.warn_on_redirect:
                        logger.warning(
                            'The web server redirected to %s. You should '
                            'revise your connection hostname or fix your '
                            'server configuration if possible to improve '
                            'performance.', newurl
                        )
                    url = newurl
                    continue
                if exc.code == 401:
                    raise AuthenticationError(
                        f'The account name ({account_name}) or password '
                        'provided is not correct (or the account does not '
                        'have the fmxml extended privilege)'
                    ) from exc
                if exc.code == 404:
                    raise CommunicationError(
                        'Could not talk to FileMaker because the Web '
                        'Publishing Engine is not responding (server '
                        'returned 404)'
                    ) from exc
                raise CommunicationError(
                    f'Unexpected response from server: {exc.code} '
                    f'({exc.reason}). Unable to communicate with the Web '
                    'Publishing Engine'
                ) from exc
            except URLError as exc:
                raise CommunicationError(f'URL Error: {exc.reason}') from exc
            try:
                return fd.read()
            finally:
                fd.close()

        raise CommunicationError(
            'While trying to reach the Web Publishing Engine, '
            'the request was redirected too many times'
        )


class _RedirectHandler(HTTPRedirectHandler):
    """Turn redirect responses into HTTPError."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        return None


class Database:
    """FileMaker database on a Server.

    Account name and password default to the ones of the server.

    """

    def __init__(self, server, name, account_name=None, password=None):
        self.server = server
        self.name = str(name)
        self.account_name = (
            server.account_name if account_name is None else account_name
        )
        self.password = server.password if password is None else password
        self._layouts = CaseInsensitiveDict()

    def layout(self, name):
        """Return Layout object of given name without contacting server."""
        try:
            return self._layouts[name]
        except KeyError:
            layout = Layout(self, name)
            self._layouts[name] = layout
            return layout

    __getitem__ = layout

    def layouts(self):
        """Return names of all layouts in database."""
        data = self.do_action('-layoutnames', [('-db', self.name)])
        return [r['LAYOUT_NAME'] for r in self.server._parse(data)]

    def scripts(self):
        """Return names of all scripts in database."""
        data = self.do_action('-scriptnames', [('-db', self.name)])
        return [r['SCRIPT_NAME'] for r in self.server._parse(data)]

    def do_action(self, action, args, options=None, path=None):
        """Submit action using the credentials of this database."""
        return self.server.do_action(self.account_name, self.password,
                                     action, args, options, path)

    def __repr__(self):
        return f'<Database {self.name!r} on {self.server.base_url}>'


class Layout:
    """FileMaker layout, through which all record actions are performed.

    The layout determines the table acted upon and the fields and portals
    returned. Actions accept keyword options, see expand_options. The
    `include_portals` option requests related records to be parsed into
    Record.portals.

    """

    def __init__(self, db, name):
        self.db = db
        self.name = str(name)
        self._info = None

    def all(self, **options):
        """Return ResultSet of all records in table."""
        return self._get_records('-findall', [], options)

    def any(self, **options):
        """Return ResultSet containing one random record."""
        return self._get_records('-findany', [], options)

    def find(self, values, **options):
        """Return ResultSet of records matching find criteria.

        Parameters
        ----------
        values : dict or str
            Field names and find criteria, using FileMaker find mode
            syntax. Anything that is not a mapping is taken as a record id.

        """
        if isinstance(values, Mapping):
            return self._get_records('-find', list(values.items()), options)
        return self._get_records('-find', [('-recid', str(values))], options)

    def edit(self, recid, values, **options):
        """Update record and return ResultSet containing it."""
        params = [('-recid', recid)]
        params.extend(values.items())
        return self._get_records('-edit', params, options)

    def create(self, values, **options):
        """Create record and return ResultSet containing it."""
        return self._get_records('-new', list(values.items()), options)

    def delete(self, recid, **options):
        """Delete record."""
        self._get_records('-delete', [('-recid', recid)], options)

    def view(self):
        """Return LayoutInfo with value lists and field controls."""
        data = self.db.do_action('-view', self._params(),
                                 path=Server.LAYOUT_PATH)
        self._info = parse_layout(data)
        return self._info

    @property
    def value_lists(self):
        """Value lists attached to fields on layout."""
        if self._info is None:
            self.view()
        return self._info.value_lists

    @property
    def field_controls(self):
        """FieldControl objects by field name."""
        if self._info is None:
            self.view()
        return self._info.field_controls

    def _params(self):
        return [('-db', self.db.name), ('-lay', self.name)]

    def _get_records(self, action, params, options):
        include_portals = bool(options.pop('include_portals', False))
        server = self.db.server
        data = self.db.do_action(action, self._params() + params, options)
        return parse_resultset(
            data,
            raise_on_401=server.raise_on_401,
            include_portals=include_portals,
            base_url=server.base_url,
            layout=self,
        )

    def __repr__(self):
        return f'<Layout {self.name!r} of database {self.db.name!r}>'


class ResultSet:
    """Result of a fmresultset query.

    A sequence of Record objects with metadata about fields and portals.

    Attributes
    ----------
    records : list
        Sequence of Record objects in the order delivered by FileMaker.
    fields : CaseInsensitiveDict
        FMField objects by field name.
    portals : CaseInsensitiveDict
        For each related table, a CaseInsensitiveDict of FMField objects
        by field name without the 'Table::' prefix.
    formats : FormatSet
        Date, time and timestamp formats used by this response.
    total_count : int
        Number of records in the table.
    foundset_count : int
        Number of records in the found set, as declared by FileMaker.
        May exceed len(records) if -max or -skip were specified.
    errorcode : int
        Error code number, 0 or 401.
    product : dict
        Attributes of the FileMaker product element.
    datasource : dict
        Attributes of the datasource element.
    layout : Layout
        Layout the query was performed on, or None.

    """

    __slots__ = (
        'records', 'fields', 'portals', 'formats', 'total_count',
        'foundset_count', 'errorcode', 'product', 'datasource', 'layout',
    )

    def __init__(self):
        self.records = []
        self.fields = CaseInsensitiveDict()
        self.portals = CaseInsensitiveDict()
        self.formats = None
        self.total_count = 0
        self.foundset_count = 0
        self.errorcode = 0
        self.product = {}
        self.datasource = {}
        self.layout = None

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)

    def __getitem__(self, index):
        return self.records[index]

    def __eq__(self, other):
        if not isinstance(other, ResultSet):
            return NotImplemented
        return (
            self.errorcode == other.errorcode
            and self.total_count == other.total_count
            and self.foundset_count == other.foundset_count
            and self.formats == other.formats
            and self.fields == other.fields
            and self.portals == other.portals
            and self.records == other.records
        )

    __hash__ = None

    def __str__(self):
        """Return string with info about ResultSet."""
        return '\n\n'.join((
            'ResultSet',
            'ERRORCODE = {}'.format(self.errorcode),
            'PRODUCT = {}'.format(self.product),
            'DATASOURCE = {}'.format(self.datasource),
            'COUNT = {} of {}'.format(self.foundset_count, self.total_count),
            'FIELDS = [\n {}\n]'.format(
                '\n '.join(str(s) for s in self.fields.values())),
            'PORTALS = {}'.format(list(self.portals)),
            'RECORDS = {}'.format(
                ('[\n {}\n]'.format(
                    '\n '.join(str(s) for s in self.records)))
                if self.records else '[]')))


class CaseInsensitiveDict(MutableMapping):
    """Dictionary with case-insensitive string keys.

    Keys are compared in lower case. The case of the last key set is
    preserved for iteration.

    >>> d = CaseInsensitiveDict({'First Name': 'John'})
    >>> d['FIRST NAME']
    'John'
    >>> list(d)
    ['First Name']

    """

    def __init__(self, data=None, **kwargs):
        self._store = {}
        self.update(data or {}, **kwargs)

    def __setitem__(self, key, value):
        self._store[key.lower()] = (key, value)

    def __getitem__(self, key):
        return self._store[key.lower()][1]

    def __delitem__(self, key):
        del self._store[key.lower()]

    def __iter__(self):
        return (key for key, _ in self._store.values())

    def __len__(self):
        return len(self._store)

    def lower_items(self):
        """Return iterator over (lowercase key, value) pairs."""
        return ((key, value[1]) for key, value in self._store.items())

    def __eq__(self, other):
        if not isinstance(other, Mapping):
            return NotImplemented
        if not isinstance(other, CaseInsensitiveDict):
            other = CaseInsensitiveDict(other)
        return dict(self.lower_items()) == dict(other.lower_items())

    def copy(self):
        return CaseInsensitiveDict(self._store.values())

    def __repr__(self):
        return f'{type(self).__name__}({dict(self.items())!r})'


class Record(CaseInsensitiveDict):
    """Single FileMaker record.

    Field values are accessed by case-insensitive field name. Repeating
    fields are returned as lists. Number fields are Decimal, date fields
    date, time fields time, timestamp fields datetime, and container
    fields the URL of the container data.

    Attributes
    ----------
    record_id : str
        FileMaker internal record id, required to edit or delete record.
    mod_id : str
        Modification id, changes whenever record is modified.
    portals : CaseInsensitiveDict
        Lists of related Record objects by table occurrence name.
    mods : CaseInsensitiveDict
        Modified field values not yet saved.
    layout : Layout
        Layout used by save, or None.
    formats : FormatSet
        Formats used to write date, time and timestamp values on save.

    """

    def __init__(self, record_id=None, mod_id=None, layout=None,
                 formats=None):
        self._loaded = False
        super().__init__()
        self.record_id = record_id
        self.mod_id = mod_id
        self.layout = layout
        self.formats = FormatSet() if formats is None else formats
        self.portals = CaseInsensitiveDict()
        self.mods = CaseInsensitiveDict()

    def __setitem__(self, key, value):
        """Set field value.

        Once the record is parsed, the change is noted in mods but not
        written to FileMaker until save is called.

        """
        if not self._loaded:
            super().__setitem__(key, value)
        elif key not in self:
            raise ParameterError(
                f'You attempted to modify the field {key!r} which does not '
                'exist in the current FileMaker layout'
            )
        else:
            self.mods[key] = value

    def save(self):
        """Write modified field values to FileMaker."""
        self._save()

    def save_if_not_modified(self):
        """Write modified field values unless record was changed meanwhile.

        Raises RecordModIdDoesNotMatchError if the record was modified in
        FileMaker after it was fetched.

        """
        self._save(modification_id=self.mod_id)

    def _save(self, **options):
        if not self.mods:
            return
        if self.layout is None:
            raise ParameterError('record is not associated with a layout')
        values = {}
        for key, value in self.mods.items():
            if isinstance(value, (list, tuple)):
                # repetitions of a repeating field
                for i, item in enumerate(value, 1):
                    values[f'{key}({i})'] = _format_value(item, self.formats)
            else:
                values[key] = _format_value(value, self.formats)
        include_portals = bool(self.portals)
        result = self.layout.edit(self.record_id, values,
                                  include_portals=include_portals, **options)
        if result.records:
            updated = result.records[0]
            for key, value in updated.items():
                CaseInsensitiveDict.__setitem__(self, key, value)
            self.mod_id = updated.mod_id
            if include_portals:
                self.portals = updated.portals
        self.mods.clear()

    def __eq__(self, other):
        if not isinstance(other, Record):
            return CaseInsensitiveDict.__eq__(self, other)
        return (
            self.record_id == other.record_id
            and self.mod_id == other.mod_id
            and CaseInsensitiveDict.__eq__(self, other)
            and self.portals == other.portals
        )

    __hash__ = None

    def __repr__(self):
        return (
            f'<Record record_id={self.record_id!r} mod_id={self.mod_id!r} '
            f'{dict(self.items())!r}>'
        )

    __str__ = __repr__


class FMField:
    """Attributes of FileMaker field-definition.

    Attributes
    ----------
    name : str
        Field name, including 'Table::' prefix for related fields.
    result : str
        Data type: 'text', 'number', 'date', 'time', 'timestamp' or
        'container'. The result type of calculation and summary fields.
    type : str
        'normal', 'calculation' or 'summary'.
    maxrepeat : int
        Number of repetitions defined for field.
    isglobal : bool
        Identifies a global field.
    emptyok : bool
        Identifies whether field may be left empty.

    """

    __slots__ = ('name', 'result', 'type', 'maxrepeat', 'isglobal',
                 'emptyok')

    RESULTS = ('text', 'number', 'date', 'time', 'timestamp', 'container')

    def __init__(self, attributes):
        # <field-definition auto-enter="no" four-digit-year="no" global="no"
        #  max-repeat="1" name="Name" not-empty="no" numeric-only="no"
        #  result="text" time-of-day="no" type="normal"/>
        self.name = attributes['name']
        self.result = attributes.get('result', 'text')
        self.type = attributes.get('type', 'normal')
        try:
            self.maxrepeat = max(1, int(attributes.get('max-repeat', 1)))
        except ValueError:
            self.maxrepeat = 1
        self.isglobal = attributes.get('global') == 'yes'
        self.emptyok = attributes.get('not-empty') != 'yes'

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f'{type(self).__name__} is read-only')
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        raise AttributeError(f'{type(self).__name__} is read-only')

    def __eq__(self, other):
        if not isinstance(other, FMField):
            return NotImplemented
        return all(getattr(self, a) == getattr(other, a)
                   for a in FMField.__slots__)

    def __hash__(self):
        return hash(tuple(getattr(self, a) for a in FMField.__slots__))

    def __str__(self):
        return ("FMField name='{}' result={} type={} maxrepeat={} "
                "isglobal={} emptyok={}".format(
                    self.name, self.result, self.type, self.maxrepeat,
                    self.isglobal, self.emptyok))

    def __repr__(self):
        return str(self)


class FormatSet:
    """Date, time and timestamp formats of a response.

    Attributes hold strptime patterns translated from the FileMaker
    formats, which are kept in `fm_date`, `fm_time` and `fm_timestamp`.

    """

    __slots__ = ('date', 'time', 'timestamp', 'fm_date', 'fm_time',
                 'fm_timestamp')

    def __init__(self, date='MM/dd/yyyy', time='HH:mm:ss',
                 timestamp='MM/dd/yyyy HH:mm:ss'):
        self.fm_date = date
        self.fm_time = time
        self.fm_timestamp = timestamp
        self.date = translate_format(date)
        self.time = translate_format(time)
        self.timestamp = translate_format(timestamp)

    def __setattr__(self, name, value):
        if hasattr(self, name):
            raise AttributeError(f'{type(self).__name__} is read-only')
        object.__setattr__(self, name, value)

    def __delattr__(self, name):
        raise AttributeError(f'{type(self).__name__} is read-only')

    def __eq__(self, other):
        if not isinstance(other, FormatSet):
            return NotImplemented
        return (self.fm_date, self.fm_time, self.fm_timestamp) == (
            other.fm_date, other.fm_time, other.fm_timestamp)

    def __hash__(self):
        return hash((self.fm_date, self.fm_time, self.fm_timestamp))

    def __repr__(self):
        return (f'FormatSet(date={self.fm_date!r}, time={self.fm_time!r}, '
                f'timestamp={self.fm_timestamp!r})')


class FieldControl:
    """Field on a FileMaker layout.

    Attributes
    ----------
    name : str
        Field name.
    style : str
        One of 'edit_box', 'scrollable', 'popup_menu', 'checkbox_set',
        'radio_button_set', 'popup_list', 'calendar', or None.
    value_list_name : str
        Name of attached value list or ''.
    value_list : list of str
        Items of attached value list or None.

    """

    __slots__ = ('name', 'style', 'value_list_name', 'value_list')

    STYLES = {
        'EDITTEXT': 'edit_box',
        'POPUPMENU': 'popup_menu',
        'CHECKBOX': 'checkbox_set',
        'RADIOBUTTONS': 'radio_button_set',
        'POPUPLIST': 'popup_list',
        'CALENDAR': 'calendar',
        'SCROLLTEXT': 'scrollable',
    }

    def __init__(self, name, style, value_list_name='', value_list=None):
        self.name = name
        self.style = FieldControl.STYLES.get(style)
        self.value_list_name = value_list_name
        self.value_list = value_list

    def __repr__(self):
        return (f"FieldControl name='{self.name}' style={self.style} "
                f"value_list_name='{self.value_list_name}'")


class LayoutInfo:
    """Result of FMPXMLLAYOUT query."""

    __slots__ = ('name', 'database', 'value_lists', 'field_controls')

    def __init__(self):
        self.name = ''
        self.database = ''
        self.value_lists = CaseInsensitiveDict()
        self.field_controls = CaseInsensitiveDict()


class ErrorKind(enum.Enum):
    """Classification of FileMaker error codes.

    Values are the names used in error messages.

    """

    UNKNOWN = 'UnknownError'
    SYSTEM = 'SystemError'
    MISSING = 'MissingError'
    RECORD_MISSING = 'RecordMissingError'
    FIELD_MISSING = 'FieldMissingError'
    SCRIPT_MISSING = 'ScriptMissingError'
    LAYOUT_MISSING = 'LayoutMissingError'
    TABLE_MISSING = 'TableMissingError'
    SECURITY = 'SecurityError'
    RECORD_ACCESS_DENIED = 'RecordAccessDeniedError'
    FIELD_CANNOT_BE_MODIFIED = 'FieldCannotBeModifiedError'
    FIELD_ACCESS_DENIED = 'FieldAccessIsDeniedError'
    CONCURRENCY = 'ConcurrencyError'
    RECORD_IN_USE = 'RecordInUseError'
    TABLE_IN_USE = 'TableInUseError'
    RECORD_MODID_MISMATCH = 'RecordModIdDoesNotMatchError'
    GENERAL = 'GeneralError'
    NO_RECORDS_FOUND = 'NoRecordsFoundError'
    VALIDATION = 'ValidationError'
    DATE_VALIDATION = 'DateValidationError'
    TIME_VALIDATION = 'TimeValidationError'
    NUMBER_VALIDATION = 'NumberValidationError'
    RANGE_VALIDATION = 'RangeValidationError'
    UNIQUE_VALIDATION = 'UniqueValidationError'
    EXISTING_VALIDATION = 'ExistingValidationError'
    VALUE_LIST_VALIDATION = 'ValueListValidationError'
    VALIDATION_CALCULATION = 'ValidationCalculationError'
    INVALID_FIND_MODE_VALUE = 'InvalidFindModeValueError'
    MAX_CHARACTERS_VALIDATION = 'MaximumCharactersValidationError'
    FILE = 'FileError'
    UNABLE_TO_OPEN_FILE = 'UnableToOpenFileError'

    @property
    def category(self):
        """Return generic kind of error code family."""
        return _ERROR_CATEGORIES.get(self, self)


class FMError(Exception):
    """Base class of exceptions raised by fmxml."""


class CommunicationError(FMError):
    """Web Publishing Engine could not be reached or answered unexpectedly."""


class AuthenticationError(FMError):
    """Account name or password was rejected."""


class ParameterError(FMError):
    """Invalid option, or modification of nonexistent field."""


class ParseError(FMError):
    """XML response is malformed or inconsistent with its metadata."""


class CoercionError(FMError, ValueError):
    """Field data cannot be converted to the field's result type.

    Attributes
    ----------
    value : str
        Field data.
    field : FMField
        Field definition.

    """

    def __init__(self, value, field, pattern=None):
        self.value = value
        self.field = field
        message = (f'cannot convert {value!r} of {field.result} field '
                   f'{field.name!r}')
        if pattern:
            message += f' using format {pattern!r}'
        super().__init__(message)


class NumberFormatError(CoercionError):
    pass


class DateFormatError(CoercionError):
    pass


class TimeFormatError(CoercionError):
    pass


class TimestampFormatError(CoercionError):
    pass


class FileMakerError(FMError):
    """Exception to report FileMaker error codes.

    Use build_error to create the subclass instance matching a code.

    Attributes
    ----------
    code : int
        Error code number.
    kind : ErrorKind
        Classification of error code.
    description : str
        Description of error code from FileMaker documentation.

    """

    CODES = {
        -1: 'Unknown error',
        0: 'No error',
        1: 'User canceled action',
        2: 'Memory error',
        3: 'Command is unavailable (for example, wrong operating system, '
           'wrong mode, etc.)',
        4: 'Command is unknown',
        5: 'Command is invalid (for example, a Set Field script step does '
           'not have a calculation specified)',
        6: 'File is read-only',
        7: 'Running out of memory',
        8: 'Empty result',
        9: 'Insufficient privileges',
        10: 'Requested data is missing',
        11: 'Name is not valid',
        12: 'Name already exists',
        13: 'File or object is in use',
        14: 'Out of range',
        15: 'Can\'t divide by zero',
        16: 'Operation failed, request retry (for example, a user query)',
        17: 'Attempt to convert foreign character set to UTF-16 failed',
        18: 'Client must provide account information to proceed',
        19: 'String contains characters other than A-Z, a-z, 0-9 (ASCII)',
        100: 'File is missing',
        101: 'Record is missing',
        102: 'Field is missing',
        103: 'Relationship is missing',
        104: 'Script is missing',
        105: 'Layout is missing',
        106: 'Table is missing',
        107: 'Index is missing',
        108: 'Value list is missing',
        109: 'Privilege set is missing',
        110: 'Related tables are missing',
        111: 'Field repetition is invalid',
        112: 'Window is missing',
        113: 'Function is missing',
        114: 'File reference is missing',
        130: 'Files are damaged or missing and must be reinstalled',
        131: 'Language pack files are missing (such as template files)',
        200: 'Record access is denied',
        201: 'Field cannot be modified',
        202: 'Field access is denied',
        203: 'No records in file to print, or password doesn\'t allow print '
             'access',
        204: 'No access to field(s) in sort order',
        205: 'User does not have access privileges to create new records; '
             'import will overwrite existing data',
        206: 'User does not have password change privileges, or file is '
             'not modifiable',
        207: 'User does not have sufficient privileges to change database '
             'schema, or file is not modifiable',
        208: 'Password does not contain enough characters',
        209: 'New password must be different from existing one',
        210: 'User account is inactive',
        211: 'Password has expired',
        212: 'Invalid user account and/or password. Please try again',
        213: 'User account and/or password does not exist',
        214: 'Too many login attempts',
        215: 'Administrator privileges cannot be duplicated',
        216: 'Guest account cannot be duplicated',
        217: 'User does not have sufficient privileges to modify '
             'administrator account',
        300: 'File is locked or in use',
        301: 'Record is in use by another user',
        302: 'Table is in use by another user',
        303: 'Database schema is in use by another user',
        304: 'Layout is in use by another user',
        306: 'Record modification ID does not match',
        400: 'Find criteria are empty',
        401: 'No records match the request',
        402: 'Selected field is not a match field for a lookup',
        403: 'Exceeding maximum record limit for trial version of '
             'FileMaker(tm)) Pro',
        404: 'Sort order is invalid',
        405: 'Number of records specified exceeds number of records that '
             'can be omitted',
        406: 'Replace/Reserialize criteria are invalid',
        407: 'One or both match fields are missing (invalid relationship)',
        408: 'Specified field has inappropriate data type for this operation',
        409: 'Import order is invalid',
        410: 'Export order is invalid',
        412: 'Wrong version of FileMaker(tm) Pro used to recover file',
        413: 'Specified field has inappropriate field type',
        414: 'Layout cannot display the result',
        415: 'Related Record Required',
        500: 'Date value does not meet validation entry options',
        501: 'Time value does not meet validation entry options',
        502: 'Number value does not meet validation entry options',
        503: 'Value in field is not within the range specified in '
             'validation entry options',
        504: 'Value in field is not unique as required in validation '
             'entry options',
        505: 'Value in field is not an existing value in the database '
             'file as required in validation entry options',
        506: 'Value in field is not listed on the value list specified '
             'in validation entry option',
        507: 'Value in field failed calculation test of validation entry '
             'option',
        508: 'Invalid value entered in Find mode',
        509: 'Field requires a valid value',
        510: 'Related value is empty or unavailable',
        511: 'Value in field exceeds maximum number of allowed characters',
        600: 'Print error has occurred',
        601: 'Combined header and footer exceed one page',
        602: 'Body doesn\'t fit on a page for current column setup',
        603: 'Print connection lost',
        700: 'File is of the wrong file type for import',
        706: 'EPSF file has no preview image',
        707: 'Graphic translator cannot be found',
        708: 'Can\'t import the file or need color monitor support to '
             'import file',
        709: 'QuickTime movie import failed',
        710: 'Unable to update QuickTime file reference because the '
             'database file is read-only',
        711: 'Import translator cannot be found',
        714: 'Password privileges do not allow the operation',
        715: 'Specified Excel worksheet or named range is missing',
        716: 'A SQL query using DELETE, INSERT, or UPDATE is not allowed '
             'for ODBC import',
        717: 'There is not enough XML/XSL information to proceed with the '
             'import or export',
        718: 'Error in parsing XML file (from Xerces)',
        719: 'Error in transforming XML using XSL (from Xalan)',
        720: 'Error when exporting; intended format does not support '
             'repeating fields',
        721: 'Unknown error occurred in the parser or the transformer',
        722: 'Cannot import data into a file that has no fields',
        723: 'You do not have permission to add records to or modify '
             'records in the target table',
        724: 'You do not have permission to add records to the target table',
        725: 'You do not have permission to modify records in the '
             'target table',
        726: 'There are more records in the import file than in the '
             'target table. Not all records were imported',
        727: 'There are more records in the target table than in the '
             'import file. Not all records were updated',
        729: 'Errors occurred during import. Records could not be imported',
        730: 'Unsupported Excel version. (Convert file to Excel 7.0 '
             '(Excel 95), Excel 97, 2000, or XP format and try again)',
        731: 'The file you are importing from contains no data',
        732: 'This file cannot be inserted because it contains other files',
        733: 'A table cannot be imported into itself',
        734: 'This file type cannot be displayed as a picture',
        735: 'This file type cannot be displayed as a picture. It will be '
             'inserted and displayed as a file 800 Unable to create file '
             'on disk',
        801: 'Unable to create temporary file on System disk',
        802: 'Unable to open file',
        803: 'File is single user or host cannot be found',
        804: 'File cannot be opened as read-only in its current state',
        805: 'File is damaged; use Recover command',
        806: 'File cannot be opened with this version of FileMaker(tm) Pro',
        807: 'File is not a FileMaker(tm) Pro file or is severely damaged',
        808: 'Cannot open file because access privileges are damaged',
        809: 'Disk/volume is full',
        810: 'Disk/volume is locked',
        811: 'Temporary file cannot be opened as FileMaker(tm) Pro file',
        813: 'Record Synchronization error on network',
        814: 'File(s) cannot be opened because maximum number is open',
        815: 'Couldn\'t open lookup file',
        816: 'Unable to convert file',
        817: 'Unable to open file because it does not belong to this solution',
        819: 'Cannot save a local copy of a remote file',
        820: 'File is in the process of being closed',
        821: 'Host forced a disconnect',
        822: 'FMI files not found; reinstall missing files',
        823: 'Cannot set file to single-user, guests are connected',
        824: 'File is damaged or not a FileMaker(tm) file',
        900: 'General spelling engine error',
        901: 'Main spelling dictionary not installed',
        902: 'Could not launch the Help system',
        903: 'Command cannot be used in a shared file',
        904: 'Command can only be used in a file hosted under '
             'FileMaker(tm) Server',
        905: 'No active field selected; command can only be used if there '
             'is an active field',
        920: 'Can\'t initialize the spelling engine',
        921: 'User dictionary cannot be loaded for editing',
        922: 'User dictionary cannot be found',
        923: 'User dictionary is read-only',
        951: 'An unexpected error occurred (returned only by '
             'web-published databases)',
        954: 'Unsupported XML grammar (returned only by '
             'web-published databases)',
        955: 'No database name (returned only by web-published databases)',
        956: 'Maximum number of database sessions exceeded (returned '
             'only by web-published databases)',
        957: 'Conflicting commands (returned only by web-published databases)',
        958: 'Parameter missing (returned only by web-published databases)',
        971: 'The user name is invalid',
        972: 'The password is invalid',
        973: 'The database is invalid',
        974: 'Permission Denied',
        975: 'The field has restricted access',
        976: 'Security is disabled',
        977: 'Invalid client IP address',
        978: 'The number of allowed guests has been exceeded',
    }

    def __init__(self, message, code=-1):
        super().__init__(message)
        self.code = code
        self.kind = classify_error(code)
        self.description = FileMakerError.CODES.get(code, 'Unknown error code')


class UnknownError(FileMakerError):
    pass


class FileMakerSystemError(FileMakerError):
    """Error codes 0 to 99."""


class MissingError(FileMakerError):
    """Error codes 100 to 199."""


class RecordMissingError(MissingError):
    pass


class FieldMissingError(MissingError):
    pass


class ScriptMissingError(MissingError):
    pass


class LayoutMissingError(MissingError):
    pass


class TableMissingError(MissingError):
    pass


class SecurityError(FileMakerError):
    """Error codes 200 to 299."""


class RecordAccessDeniedError(SecurityError):
    pass


class FieldCannotBeModifiedError(SecurityError):
    pass


class FieldAccessIsDeniedError(SecurityError):
    pass


class ConcurrencyError(FileMakerError):
    """Error codes 300 to 399."""


class RecordInUseError(ConcurrencyError):
    pass


class TableInUseError(ConcurrencyError):
    pass


class RecordModIdDoesNotMatchError(ConcurrencyError):
    pass


class GeneralError(FileMakerError):
    """Error codes 400 to 499."""


class NoRecordsFoundError(GeneralError):
    pass


class ValidationError(FileMakerError):
    """Error codes 500 to 599."""


class DateValidationError(ValidationError):
    pass


class TimeValidationError(ValidationError):
    pass


class NumberValidationError(ValidationError):
    pass


class RangeValidationError(ValidationError):
    pass


class UniqueValidationError(ValidationError):
    pass


class ExistingValidationError(ValidationError):
    pass


class ValueListValidationError(ValidationError):
    pass


class ValidationCalculationError(ValidationError):
    pass


class InvalidFindModeValueError(ValidationError):
    pass


class MaximumCharactersValidationError(ValidationError):
    pass


class FileError(FileMakerError):
    """Error codes 800 to 899."""


class UnableToOpenFileError(FileError):
    pass


# (first code, last code, kind) of each error code family
_ERROR_RANGES = (
    (0, 99, ErrorKind.SYSTEM),
    (100, 199, ErrorKind.MISSING),
    (200, 299, ErrorKind.SECURITY),
    (300, 399, ErrorKind.CONCURRENCY),
    (400, 499, ErrorKind.GENERAL),
    (500, 599, ErrorKind.VALIDATION),
    (800, 899, ErrorKind.FILE),
)

# specific codes, checked before _ERROR_RANGES
_ERROR_CODES = {
    101: ErrorKind.RECORD_MISSING,
    102: ErrorKind.FIELD_MISSING,
    104: ErrorKind.SCRIPT_MISSING,
    105: ErrorKind.LAYOUT_MISSING,
    106: ErrorKind.TABLE_MISSING,
    200: ErrorKind.RECORD_ACCESS_DENIED,
    201: ErrorKind.FIELD_CANNOT_BE_MODIFIED,
    202: ErrorKind.FIELD_ACCESS_DENIED,
    301: ErrorKind.RECORD_IN_USE,
    302: ErrorKind.TABLE_IN_USE,
    306: ErrorKind.RECORD_MODID_MISMATCH,
    401: ErrorKind.NO_RECORDS_FOUND,
    500: ErrorKind.DATE_VALIDATION,
    501: ErrorKind.TIME_VALIDATION,
    502: ErrorKind.NUMBER_VALIDATION,
    503: ErrorKind.RANGE_VALIDATION,
    504: ErrorKind.UNIQUE_VALIDATION,
    505: ErrorKind.EXISTING_VALIDATION,
    506: ErrorKind.VALUE_LIST_VALIDATION,
    507: ErrorKind.VALIDATION_CALCULATION,
    508: ErrorKind.INVALID_FIND_MODE_VALUE,
    511: ErrorKind.MAX_CHARACTERS_VALIDATION,
    802: ErrorKind.UNABLE_TO_OPEN_FILE,
}

_ERROR_CATEGORIES = {
    kind: category
    for code, kind in _ERROR_CODES.items()
    for low, high, category in _ERROR_RANGES
    if low <= code <= high
}

_ERROR_CLASSES = {
    ErrorKind.UNKNOWN: UnknownError,
    ErrorKind.SYSTEM: FileMakerSystemError,
    ErrorKind.MISSING: MissingError,
    ErrorKind.RECORD_MISSING: RecordMissingError,
    ErrorKind.FIELD_MISSING: FieldMissingError,
    ErrorKind.SCRIPT_MISSING: ScriptMissingError,
    ErrorKind.LAYOUT_MISSING: LayoutMissingError,
    ErrorKind.TABLE_MISSING: TableMissingError,
    ErrorKind.SECURITY: SecurityError,
    ErrorKind.RECORD_ACCESS_DENIED: RecordAccessDeniedError,
    ErrorKind.FIELD_CANNOT_BE_MODIFIED: FieldCannotBeModifiedError,
    ErrorKind.FIELD_ACCESS_DENIED: FieldAccessIsDeniedError,
    ErrorKind.CONCURRENCY: ConcurrencyError,
    ErrorKind.RECORD_IN_USE: RecordInUseError,
    ErrorKind.TABLE_IN_USE: TableInUseError,
    ErrorKind.RECORD_MODID_MISMATCH: RecordModIdDoesNotMatchError,
    ErrorKind.GENERAL: GeneralError,
    ErrorKind.NO_RECORDS_FOUND: NoRecordsFoundError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.DATE_VALIDATION: DateValidationError,
    ErrorKind.TIME_VALIDATION: TimeValidationError,
    ErrorKind.NUMBER_VALIDATION: NumberValidationError,
    ErrorKind.RANGE_VALIDATION: RangeValidationError,
    ErrorKind.UNIQUE_VALIDATION: UniqueValidationError,
    ErrorKind.EXISTING_VALIDATION: ExistingValidationError,
    ErrorKind.VALUE_LIST_VALIDATION: ValueListValidationError,
    ErrorKind.VALIDATION_CALCULATION: ValidationCalculationError,
    ErrorKind.INVALID_FIND_MODE_VALUE: InvalidFindModeValueError,
    ErrorKind.MAX_CHARACTERS_VALIDATION: MaximumCharactersValidationError,
    ErrorKind.FILE: FileError,
    ErrorKind.UNABLE_TO_OPEN_FILE: UnableToOpenFileError,
}


def classify_error(code):
    """Return ErrorKind of FileMaker error code.

    >>> classify_error(102)
    <ErrorKind.FIELD_MISSING: 'FieldMissingError'>
    >>> classify_error(203)
    <ErrorKind.SECURITY: 'SecurityError'>
    >>> classify_error(900)
    <ErrorKind.UNKNOWN: 'UnknownError'>

    """
    code = int(code)
    try:
        return _ERROR_CODES[code]
    except KeyError:
        pass
    for low, high, kind in _ERROR_RANGES:
        if low <= code <= high:
            return kind
    return ErrorKind.UNKNOWN


def build_error(code, message=None):
    """Return FileMakerError subclass instance for error code.

    Parameters
    ----------
    code : int
        FileMaker error code number.
    message : str
        Optional description inserted into the default message.

    """
    code = int(code)
    kind = classify_error(code)
    if message is None or not message.strip():
        text = f'{kind.value} occurred: (FileMaker Error #{code})'
    else:
        text = f'{kind.value} occurred: {message} (FileMaker Error #{code})'
    return _ERROR_CLASSES[kind](text, code)


_FORMAT_TOKENS = {
    'MM': '%m',
    'dd': '%d',
    'yyyy': '%Y',
    'HH': '%H',
    'mm': '%M',
    'ss': '%S',
}

_FORMAT_PATTERN = re.compile('|'.join(_FORMAT_TOKENS))


def translate_format(fm_format):
    """Return strptime pattern from FileMaker date or time format."""
    return _FORMAT_PATTERN.sub(lambda m: _FORMAT_TOKENS[m.group()], fm_format)


def _to_text(value, field, formats, base_url):
    return value


def _to_number(value, field, formats, base_url):
    try:
        return Decimal(value)
    except (InvalidOperation, ValueError):
        raise NumberFormatError(value, field) from None


def _to_date(value, field, formats, base_url):
    try:
        return datetime.strptime(value, formats.date).date()
    except ValueError:
        raise DateFormatError(value, field, formats.date) from None


def _to_time(value, field, formats, base_url):
    try:
        return datetime.strptime(value, formats.time).time()
    except ValueError:
        raise TimeFormatError(value, field, formats.time) from None


def _to_timestamp(value, field, formats, base_url):
    try:
        return datetime.strptime(value, formats.timestamp)
    except ValueError:
        raise TimestampFormatError(value, field, formats.timestamp) from None


def _to_container(value, field, formats, base_url):
    return f'{base_url}{value}'


_COERCE = {  # map FileMaker result types to converters
    'text': _to_text,
    'number': _to_number,
    'date': _to_date,
    'time': _to_time,
    'timestamp': _to_timestamp,
    'container': _to_container,
}


def coerce(value, field, formats, base_url=''):
    """Return field data converted to Python type.

    Parameters
    ----------
    value : str
        Text of data element.
    field : FMField
        Field definition. Its result type selects the conversion.
    formats : FormatSet
        Date, time and timestamp formats of the response.
    base_url : str
        Scheme, host and port of the server, prepended to the path of
        container data, e.g. 'https://filemaker.domain.com:443'.

    Empty data of non-text fields is returned as None. Data of unknown
    result types is returned as None.

    """
    if field.result == 'text':
        return '' if value is None else value
    if not value:
        return None
    try:
        convert = _COERCE[field.result]
    except KeyError:
        return None
    return convert(value, field, formats, base_url)


def _format_value(value, formats):
    """Return field value as text in the date and time formats of response."""
    if value is None:
        return ''
    # datetime is a subclass of date
    if isinstance(value, datetime):
        return value.strftime(formats.timestamp)
    if isinstance(value, date):
        return value.strftime(formats.date)
    if isinstance(value, time):
        return value.strftime(formats.time)
    return str(value)


def parse_record(element, fields, formats, portals=None, table=None,
                 include_portals=False, base_url='', layout=None):
    """Return Record from fmresultset record element.

    Parameters
    ----------
    element : lxml.etree._Element
        Record element without namespace.
    fields : CaseInsensitiveDict
        FMField objects by field name.
    formats : FormatSet
        Date, time and timestamp formats of the response.
    portals : CaseInsensitiveDict
        For each related table, FMField objects by field name.
    table : str
        Name of related table if element is a portal row. The 'table::'
        prefix is removed from field names.
    include_portals : bool
        Parse relatedset elements into Record.portals.
    base_url : str
        URL of server used for container fields.
    layout : Layout
        Layout used to save the record.

    """
    record = Record(element.get('record-id'), element.get('mod-id'), layout,
                    formats)

    for field in element.iterchildren('field'):
        name = _strip_table(field.get('name', ''), table)
        try:
            meta = fields[name]
        except KeyError:
            raise ParseError(
                f'field {name!r} is not defined in the response metadata'
            ) from None
        datum = [
            coerce(data.text, meta, formats, base_url)
            for data in field.iterchildren('data')
        ]
        if not datum:
            value = None
        elif len(datum) == 1:
            value = datum[0]
        else:
            value = datum
        record[name] = value

    if include_portals and table is None:
        for relatedset in element.iterchildren('relatedset'):
            tablename = relatedset.get('table', '')
            try:
                portal_fields = portals[tablename]
            except (KeyError, TypeError):
                raise ParseError(
                    f'related set {tablename!r} is not defined in the '
                    'response metadata'
                ) from None
            record.portals[tablename] = [
                parse_record(row, portal_fields, formats, table=tablename,
                             base_url=base_url)
                for row in relatedset.iterchildren('record')
            ]

    record._loaded = True
    return record


def parse_resultset(data, raise_on_401=False, include_portals=False,
                    base_url='', layout=None):
    """Return ResultSet from fmresultset XML document.

    Parameters
    ----------
    data : bytes or str
        Complete XML response of the Web Publishing Engine.
    raise_on_401 : bool
        Raise NoRecordsFoundError for error code 401. By default, an empty
        ResultSet is returned.
    include_portals : bool
        Parse related record sets into Record.portals.
    base_url : str
        Scheme, host and port of the server, used for container fields.
    layout : Layout
        Layout the records are saved through.

    Raises FileMakerError subclass instances for non-zero error codes,
    ParseError for malformed documents, and CoercionError subclass
    instances for field data not matching the field type.

    """
    root = _parse_xml(data)

    # <error code="0"/>
    try:
        errorcode = int(root.find('error').get('code'))
    except (AttributeError, TypeError, ValueError):
        errorcode = -1
    if errorcode != 0 and (errorcode != 401 or raise_on_401):
        raise build_error(errorcode)

    result = ResultSet()
    result.errorcode = errorcode
    result.layout = layout

    # <product build="" name="FileMaker Web Publishing Engine" version=""/>
    product = root.find('product')
    if product is not None:
        result.product.update(product.attrib)

    # <datasource database="" date-format="MM/dd/yyyy" layout="" table=""
    #  time-format="HH:mm:ss" timestamp-format="MM/dd/yyyy HH:mm:ss"
    #  total-count="68"/>
    datasource = root.find('datasource')
    if datasource is not None:
        result.datasource.update(datasource.attrib)
    attrib = result.datasource
    result.formats = FormatSet(
        attrib.get('date-format', 'MM/dd/yyyy'),
        attrib.get('time-format', 'HH:mm:ss'),
        attrib.get('timestamp-format', 'MM/dd/yyyy HH:mm:ss'),
    )
    result.total_count = _int_attribute(datasource, 'total-count')

    # <resultset count="1" fetch-size="1">
    resultset = root.find('resultset')
    result.foundset_count = _int_attribute(resultset, 'count')

    # <metadata>
    metadata = root.find('metadata')
    if metadata is not None:
        for definition in metadata.iterchildren('field-definition'):
            field = FMField(definition.attrib)
            result.fields[field.name] = field
        for relatedset in metadata.iterchildren('relatedset-definition'):
            table = relatedset.get('table', '')
            fields = CaseInsensitiveDict()
            for definition in relatedset.iterchildren('field-definition'):
                field = FMField(definition.attrib)
                fields[_strip_table(field.name, table)] = field
            result.portals[table] = fields

    if resultset is not None:
        for element in resultset.iterchildren('record'):
            result.records.append(parse_record(
                element, result.fields, result.formats,
                portals=result.portals,
                include_portals=include_portals,
                base_url=base_url,
                layout=layout,
            ))

    return result


def parse_layout(data):
    """Return LayoutInfo from FMPXMLLAYOUT XML document."""
    root = _parse_xml(data)

    # <ERRORCODE>0</ERRORCODE>
    try:
        errorcode = int(root.findtext('ERRORCODE'))
    except (TypeError, ValueError):
        errorcode = -1
    if errorcode != 0:
        raise build_error(errorcode)

    info = LayoutInfo()

    # <VALUELISTS><VALUELIST NAME="Colors"><VALUE>Red</VALUE>...
    valuelists = root.find('VALUELISTS')
    if valuelists is not None:
        for valuelist in valuelists.iterchildren('VALUELIST'):
            info.value_lists[valuelist.get('NAME', '')] = [
                value.text or '' for value in valuelist.iterchildren('VALUE')
            ]

    # <LAYOUT DATABASE="" NAME=""><FIELD NAME="">
    #  <STYLE TYPE="EDITTEXT" VALUELIST=""/></FIELD>
    layout = root.find('LAYOUT')
    if layout is None:
        return info
    info.name = layout.get('NAME', '')
    info.database = layout.get('DATABASE', '')
    for field in layout.iterchildren('FIELD'):
        name = field.get('NAME', '')
        style = field.find('STYLE')
        if style is None:
            style_type = value_list_name = ''
        else:
            style_type = style.get('TYPE', '')
            value_list_name = style.get('VALUELIST', '')
        value_list = (
            info.value_lists.get(value_list_name) if value_list_name
            else None
        )
        control = FieldControl(name, style_type, value_list_name, value_list)
        existing = info.field_controls.get(name)
        if existing is None:
            info.field_controls[name] = control
        elif isinstance(existing, list):
            existing.append(control)
        else:
            info.field_controls[name] = [existing, control]
    return info


_OPTIONS = {
    'max_records': '-max',
    'skip_records': '-skip',
    'response_layout': '-lay.response',
    'logical_operator': '-lop',
    'modification_id': '-modid',
}

_SORT_OPTIONS = {
    'sort_field': '-sortfield',
    'sort_order': '-sortorder',
}

_SCRIPT_OPTIONS = {
    'post_script': '-script',
    'pre_find_script': '-script.prefind',
    'pre_sort_script': '-script.presort',
}


def expand_options(options):
    """Return list of query parameters from keyword options.

    Parameters
    ----------
    options : dict
        max_records : int
            Maximum number of records returned.
        skip_records : int
            Number of records in found set to skip.
        sort_field : str or sequence of str
            Field(s) to sort by, at most 9.
        sort_order : str or sequence of str
            'ascend', 'descend', or name of a value list, per sort field.
        post_script, pre_find_script, pre_sort_script : str or (str, str)
            Script to perform after find and sort, before find, or after
            find and before sort. Optionally with script parameter.
        response_layout : str
            Layout to switch to before producing the response.
        logical_operator : str
            'and' or 'or' combination of find criteria.
        modification_id : str
            Action fails if record was modified after this mod_id.

    >>> expand_options({'max_records': 5, 'sort_field': ['a', 'b']})
    [('-max', 5), ('-sortfield.1', 'a'), ('-sortfield.2', 'b')]

    """
    result = []
    for key, value in options.items():
        if key in _OPTIONS:
            result.append((_OPTIONS[key], value))
        elif key in _SORT_OPTIONS:
            param = _SORT_OPTIONS[key]
            if isinstance(value, (list, tuple)):
                if len(value) > 9:
                    raise ParameterError(
                        f'{key} can have at most 9 fields, but you passed '
                        f'a sequence with {len(value)}'
                    )
                result.extend(
                    (f'{param}.{i}', v) for i, v in enumerate(value, 1)
                )
            else:
                result.append((f'{param}.1', value))
        elif key in _SCRIPT_OPTIONS:
            param = _SCRIPT_OPTIONS[key]
            if isinstance(value, (list, tuple)):
                name, arg = value
                result.append((param, name))
                result.append((param + '.param', arg))
            else:
                result.append((param, value))
        else:
            raise ParameterError(f'Invalid option: {key}')
    return result


def _parse_xml(data):
    """Return root element of XML document with namespaces removed."""
    if isinstance(data, str):
        data = data.encode('utf-8')
    parser = etree.XMLParser(resolve_entities=False, no_network=True,
                             remove_comments=True, remove_pis=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as exc:
        raise ParseError(f'invalid XML response: {exc}') from exc
    for element in root.iter():
        if isinstance(element.tag, str):
            element.tag = etree.QName(element).localname
    etree.cleanup_namespaces(root)
    return root


def _int_attribute(element, name):
    """Return integer value of element attribute, or 0 if missing."""
    if element is None:
        return 0
    value = element.get(name)
    if not value:
        return 0
    try:
        return int(value)
    except ValueError:
        raise ParseError(f'invalid {name} attribute {value!r}') from None


def _strip_table(name, table):
    """Return field name without 'table::' prefix."""
    if table:
        prefix = table + '::'
        if name[:len(prefix)].lower() == prefix.lower():
            return name[len(prefix):]
    return name


if __name__ == '__main__':
    import doctest

    doctest.testmod()
