import base64
import io
import unittest
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qsl

import fmxml
from fmxml import Server

from tests import (
    BILL,
    CUSTOMERS,
    CUSTOMERS_METADATA,
    FMPXMLLAYOUT,
    field_definition,
    fmresultset,
)


def names_response(field, names):
    records = [
        f'<record mod-id="0" record-id="{i}"><field name="{field}">'
        f'<data>{name}</data></field></record>'
        for i, name in enumerate(names, 1)
    ]
    return fmresultset(field_definition(field), records)


def http_error(url, code, headers=None):
    return HTTPError(url, code, 'message', headers or {}, io.BytesIO(b''))


class FakeOpener:
    """Return queued responses and record requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def open(self, request, timeout=None):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        fd = MagicMock()
        fd.read.return_value = response
        return fd

    def params(self, index=-1):
        return parse_qsl(self.requests[index].data.decode('utf-8'),
                         keep_blank_values=True)


class ServerTestCase(unittest.TestCase):

    def setUp(self):
        self.server = Server('fm.example.com', ssl=False,
                             account_name='admin', password='secret')

    def opener(self, *responses):
        opener = FakeOpener(*responses)
        patcher = patch('fmxml.fmxml.build_opener', return_value=opener)
        patcher.start()
        self.addCleanup(patcher.stop)
        return opener


class TestServer(ServerTestCase):

    def test_base_url(self):
        self.assertEqual(self.server.base_url, 'http://fm.example.com:80')
        self.assertEqual(Server('fm.example.com').base_url,
                         'https://fm.example.com:443')
        self.assertEqual(Server('10.0.0.1', port=8080, ssl=False).base_url,
                         'http://10.0.0.1:8080')

    def test_databases_and_layouts_are_cached(self):
        db = self.server.db('Customers')
        self.assertIs(self.server['customers'], db)
        self.assertIs(db.layout('Details'), db['DETAILS'])
        self.assertEqual(db.account_name, 'admin')
        other = fmxml.Database(self.server, 'Other', 'guest', '')
        self.assertEqual(other.account_name, 'guest')
        self.assertEqual(other.password, '')

    def test_do_action(self):
        opener = self.opener(b'<xml/>')
        data = self.server.do_action(
            'admin', 'secret', '-find', {'-db': 'Customers', 'Name': 'Bill'},
            {'max_records': 5}
        )
        self.assertEqual(data, b'<xml/>')
        request = opener.requests[0]
        self.assertEqual(request.full_url,
                         'http://fm.example.com:80/fmi/xml/fmresultset.xml')
        self.assertEqual(request.get_method(), 'POST')
        self.assertEqual(
            opener.params(),
            [('-db', 'Customers'), ('Name', 'Bill'), ('-max', '5'),
             ('-find', '')]
        )
        auth = base64.b64encode(b'admin:secret').decode('ascii')
        self.assertEqual(request.get_header('Authorization'), 'Basic ' + auth)

    def test_databases(self):
        opener = self.opener(
            names_response('DATABASE_NAME', ['Customers', 'Invoices'])
        )
        self.assertEqual(self.server.databases(), ['Customers', 'Invoices'])
        self.assertEqual(opener.params(), [('-dbnames', '')])

    def test_layouts_and_scripts(self):
        opener = self.opener(
            names_response('LAYOUT_NAME', ['Details', 'List']),
            names_response('SCRIPT_NAME', ['Cleanup']),
        )
        db = self.server['Customers']
        self.assertEqual(db.layouts(), ['Details', 'List'])
        self.assertEqual(opener.params(), [('-db', 'Customers'),
                                           ('-layoutnames', '')])
        self.assertEqual(db.scripts(), ['Cleanup'])
        self.assertEqual(opener.params(), [('-db', 'Customers'),
                                           ('-scriptnames', '')])


class TestFetch(ServerTestCase):

    url = 'http://fm.example.com:80/fmi/xml/fmresultset.xml'

    def test_authentication_error(self):
        self.opener(http_error(self.url, 401))
        with self.assertRaises(fmxml.AuthenticationError) as context:
            self.server.databases()
        self.assertIn('admin', str(context.exception))

    def test_not_found(self):
        self.opener(http_error(self.url, 404))
        with self.assertRaises(fmxml.CommunicationError) as context:
            self.server.databases()
        self.assertIn('404', str(context.exception))

    def test_unexpected_status(self):
        self.opener(http_error(self.url, 500))
        with self.assertRaises(fmxml.CommunicationError) as context:
            self.server.databases()
        self.assertIn('Unexpected response from server: 500',
                      str(context.exception))

    def test_url_error(self):
        self.opener(URLError('Name or service not known'))
        with self.assertRaises(fmxml.CommunicationError) as context:
            self.server.databases()
        self.assertIn('URL Error', str(context.exception))

    def test_redirect(self):
        opener = self.opener(
            http_error(self.url, 302, {'Location': 'http://fm2.example.com'
                                                   '/fmi/xml/fmresultset.xml'}),
            names_response('DATABASE_NAME', ['Customers']),
        )
        with self.assertLogs('fmxml', level='WARNING') as logs:
            self.assertEqual(self.server.databases(), ['Customers'])
        self.assertIn('fm2.example.com', logs.output[0])
        self.assertEqual(len(opener.requests), 2)
        self.assertEqual(opener.requests[1].full_url,
                         'http://fm2.example.com/fmi/xml/fmresultset.xml')
        self.assertEqual(opener.params(1), [('-dbnames', '')])

    def test_redirect_response_closed(self):
        redirect = http_error(self.url, 302, {'Location': self.url})
        self.opener(redirect, names_response('DATABASE_NAME', []))
        self.server.warn_on_redirect = False
        self.server.databases()
        self.assertTrue(redirect.fp.closed)

    def test_relative_redirect(self):
        opener = self.opener(
            http_error(self.url, 301, {'Location': '/moved/fmresultset.xml'}),
            names_response('DATABASE_NAME', []),
        )
        self.server.warn_on_redirect = False
        self.assertEqual(self.server.databases(), [])
        self.assertEqual(opener.requests[1].full_url,
                         'http://fm.example.com:80/moved/fmresultset.xml')

    def test_too_many_redirects(self):
        redirect = {'Location': self.url}
        self.opener(*(http_error(self.url, 302, redirect)
                      for _ in range(Server.MAX_REDIRECTS + 1)))
        self.server.warn_on_redirect = False
        with self.assertRaises(fmxml.CommunicationError) as context:
            self.server.databases()
        self.assertIn('redirected too many times', str(context.exception))

    def test_missing_root_cert(self):
        server = Server('fm.example.com', root_cert_name='missing.pem',
                        root_cert_path='/nonexistent')
        with self.assertRaises(fmxml.ParameterError):
            server.databases()


class TestLayout(ServerTestCase):

    def setUp(self):
        super().setUp()
        self.layout = self.server['Customers']['Details']

    def test_all(self):
        opener = self.opener(CUSTOMERS)
        result = self.layout.all(max_records=2)
        self.assertEqual(len(result), 2)
        self.assertIs(result.layout, self.layout)
        self.assertIs(result[0].layout, self.layout)
        self.assertEqual(
            result[0]['Photo'],
            'http://fm.example.com:80/fmi/xml/cnt/photo.jpg?-db=Customers'
            '&-lay=Details&-recid=12&-field=Photo(1)'
        )
        self.assertEqual(
            opener.params(),
            [('-db', 'Customers'), ('-lay', 'Details'), ('-max', '2'),
             ('-findall', '')]
        )

    def test_any(self):
        opener = self.opener(CUSTOMERS)
        self.layout.any()
        self.assertEqual(opener.params()[-1], ('-findany', ''))

    def test_find(self):
        opener = self.opener(CUSTOMERS, CUSTOMERS)
        result = self.layout.find({'Name': 'Bill'}, include_portals=True,
                                  sort_field='Name')
        self.assertEqual(result[0].portals['Orders'][0]['Item'], 'Widget')
        self.assertEqual(
            opener.params(0),
            [('-db', 'Customers'), ('-lay', 'Details'), ('Name', 'Bill'),
             ('-sortfield.1', 'Name'), ('-find', '')]
        )
        self.layout.find(12)
        self.assertEqual(
            opener.params(1),
            [('-db', 'Customers'), ('-lay', 'Details'), ('-recid', '12'),
             ('-find', '')]
        )

    def test_find_no_records(self):
        self.opener(fmresultset(code=401), fmresultset(code=401))
        self.assertEqual(len(self.layout.find({'Name': 'Nobody'})), 0)
        self.server.raise_on_401 = True
        with self.assertRaises(fmxml.NoRecordsFoundError):
            self.layout.find({'Name': 'Nobody'})

    def test_create_edit_delete(self):
        opener = self.opener(CUSTOMERS, CUSTOMERS, fmresultset())
        self.layout.create({'Name': 'Bill'})
        self.assertEqual(opener.params(0)[2:],
                         [('Name', 'Bill'), ('-new', '')])
        self.layout.edit('12', {'Name': 'William'})
        self.assertEqual(opener.params(1)[2:],
                         [('-recid', '12'), ('Name', 'William'),
                          ('-edit', '')])
        self.assertIsNone(self.layout.delete('12'))
        self.assertEqual(opener.params(2)[2:],
                         [('-recid', '12'), ('-delete', '')])

    def test_record_save(self):
        opener = self.opener(CUSTOMERS, CUSTOMERS)
        record = self.layout.all()[0]
        record['Name'] = 'William'
        record.save()
        self.assertEqual(
            opener.params(1),
            [('-db', 'Customers'), ('-lay', 'Details'), ('-recid', '12'),
             ('Name', 'William'), ('-edit', '')]
        )
        self.assertEqual(len(record.mods), 0)
        self.assertEqual(record['Name'], 'Bill')

    def test_record_save_formats_values(self):
        opener = self.opener(CUSTOMERS, CUSTOMERS)
        record = self.layout.all()[0]
        record['Birthday'] = record['Birthday']
        record['Opens'] = record['Opens']
        record['Modified'] = record['Modified']
        record['Balance'] = record['Balance']
        record['Phones'] = ['555-0000', None]
        record.save()
        self.assertEqual(
            opener.params(1)[3:],
            [('Birthday', '02/29/1980'), ('Opens', '08:30:00'),
             ('Modified', '12/31/2019 23:59:58'),
             ('Balance', '12345678901234567890.123456789'),
             ('Phones(1)', '555-0000'), ('Phones(2)', ''), ('-edit', '')]
        )

    def test_record_save_refreshes_portals(self):
        updated = fmresultset(CUSTOMERS_METADATA,
                              [BILL.replace('Widget', 'Sprocket')])
        opener = self.opener(CUSTOMERS, updated)
        record = self.layout.all(include_portals=True)[0]
        self.assertEqual(record.portals['Orders'][0]['Item'], 'Widget')
        record['Name'] = 'William'
        record.save()
        self.assertEqual(record.portals['Orders'][0]['Item'], 'Sprocket')
        self.assertEqual(opener.params(1)[-1], ('-edit', ''))

    def test_record_save_without_portals(self):
        self.opener(CUSTOMERS, CUSTOMERS)
        record = self.layout.all()[0]
        record['Name'] = 'William'
        record.save()
        self.assertEqual(len(record.portals), 0)

    def test_record_save_unmodified(self):
        opener = self.opener(CUSTOMERS)
        record = self.layout.all()[0]
        record.save()
        self.assertEqual(len(opener.requests), 1)

    def test_record_save_if_not_modified(self):
        opener = self.opener(CUSTOMERS, fmresultset(code=306))
        record = self.layout.all()[0]
        record['Name'] = 'William'
        with self.assertRaises(fmxml.RecordModIdDoesNotMatchError):
            record.save_if_not_modified()
        self.assertIn(('-modid', '3'), opener.params(1))
        self.assertEqual(record.mods['Name'], 'William')

    def test_view(self):
        opener = self.opener(FMPXMLLAYOUT)
        self.assertEqual(self.layout.value_lists['Colors'], ['Red', 'Green'])
        self.assertEqual(self.layout.field_controls['Name'].style, 'edit_box')
        self.assertEqual(len(opener.requests), 1)
        self.assertEqual(
            opener.requests[0].full_url,
            'http://fm.example.com:80/fmi/xml/FMPXMLLAYOUT.xml'
        )
        self.assertEqual(opener.params(),
                         [('-db', 'Customers'), ('-lay', 'Details'),
                          ('-view', '')])


if __name__ == '__main__':
    unittest.main()
