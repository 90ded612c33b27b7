FMRESULTSET = '''<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!DOCTYPE fmresultset PUBLIC "-//FMI//DTD fmresultset//EN" "/fmi/xml/fmresultset.dtd">
<fmresultset xmlns="http://www.filemaker.com/xml/fmresultset" version="1.0">
<error code="{code}"/>
<product build="03/20/2019" name="FileMaker Web Publishing Engine" version="18.0.1.123"/>
<datasource database="Customers" date-format="MM/dd/yyyy" layout="Details" table="Customers" time-format="HH:mm:ss" timestamp-format="MM/dd/yyyy HH:mm:ss" total-count="{total}"/>
<metadata>
{metadata}
</metadata>
<resultset count="{count}" fetch-size="{fetch}">
{records}
</resultset>
</fmresultset>
'''


def field_definition(name, result='text', max_repeat=1, type='normal',
                     isglobal='no'):
    return (
        f'<field-definition auto-enter="no" four-digit-year="no" '
        f'global="{isglobal}" max-repeat="{max_repeat}" name="{name}" '
        f'not-empty="no" numeric-only="no" result="{result}" '
        f'time-of-day="no" type="{type}"/>'
    )


def fmresultset(metadata='', records=(), code=0, total=None):
    """Return fmresultset document as bytes.

    records is a sequence of top-level record elements as strings.

    """
    return FMRESULTSET.format(
        code=code,
        total=len(records) if total is None else total,
        count=len(records),
        fetch=len(records),
        metadata=metadata,
        records='\n'.join(records),
    ).encode('utf-8')


BILL = '\n'.join((
    '<record mod-id="3" record-id="12">',
    '<field name="Name"><data>Bill</data></field>',
    '<field name="Balance"><data>12345678901234567890.123456789</data>'
    '</field>',
    '<field name="Birthday"><data>02/29/1980</data></field>',
    '<field name="Opens"><data>08:30:00</data></field>',
    '<field name="Modified"><data>12/31/2019 23:59:58</data></field>',
    '<field name="Photo"><data>/fmi/xml/cnt/photo.jpg?-db=Customers'
    '&amp;-lay=Details&amp;-recid=12&amp;-field=Photo(1)</data></field>',
    '<field name="Phones"><data>555-1234</data><data>555-5678</data>'
    '<data></data></field>',
    '<relatedset count="2" table="Orders">',
    '<record mod-id="0" record-id="101">',
    '<field name="Orders::Total"><data>10.50</data></field>',
    '<field name="Orders::Item"><data>Widget</data></field>',
    '</record>',
    '<record mod-id="1" record-id="102">',
    '<field name="Orders::Total"><data></data></field>',
    '<field name="Orders::Item"><data>Gadget</data></field>',
    '</record>',
    '</relatedset>',
    '</record>',
))

EMPTY = '\n'.join((
    '<record mod-id="7" record-id="13">',
    '<field name="Name"><data></data></field>',
    '<field name="Balance"><data></data></field>',
    '<field name="Birthday"><data></data></field>',
    '<field name="Opens"><data></data></field>',
    '<field name="Modified"><data></data></field>',
    '<field name="Photo"><data></data></field>',
    '<field name="Phones"></field>',
    '<relatedset count="0" table="Orders">',
    '</relatedset>',
    '</record>',
))

CUSTOMERS_METADATA = '\n'.join((
    field_definition('Name'),
    field_definition('Balance', 'number'),
    field_definition('Birthday', 'date'),
    field_definition('Opens', 'time'),
    field_definition('Modified', 'timestamp'),
    field_definition('Photo', 'container'),
    field_definition('Phones', max_repeat=3),
    '<relatedset-definition table="Orders">',
    field_definition('Orders::Total', 'number'),
    field_definition('Orders::Item'),
    '</relatedset-definition>',
))

CUSTOMERS = fmresultset(CUSTOMERS_METADATA, (BILL, EMPTY), total=68)

FMPXMLLAYOUT = b'''<?xml version="1.0" encoding="UTF-8" standalone="no"?>
<!DOCTYPE FMPXMLLAYOUT PUBLIC "-//FMI//DTD FMPXMLLAYOUT//EN" "/fmi/xml/FMPXMLLAYOUT.dtd">
<FMPXMLLAYOUT xmlns="http://www.filemaker.com/fmpxmllayout">
<ERRORCODE>0</ERRORCODE>
<PRODUCT BUILD="03/20/2019" NAME="FileMaker Web Publishing Engine" VERSION="18.0.1.123"/>
<LAYOUT DATABASE="Customers" NAME="Details">
<FIELD NAME="Name"><STYLE TYPE="EDITTEXT" VALUELIST=""/></FIELD>
<FIELD NAME="Color"><STYLE TYPE="POPUPMENU" VALUELIST="Colors"/></FIELD>
<FIELD NAME="Color"><STYLE TYPE="RADIOBUTTONS" VALUELIST="Colors"/></FIELD>
<FIELD NAME="Notes"><STYLE TYPE="SCROLLTEXT" VALUELIST=""/></FIELD>
<FIELD NAME="Odd"><STYLE TYPE="SLIDER" VALUELIST=""/></FIELD>
</LAYOUT>
<VALUELISTS>
<VALUELIST NAME="Colors"><VALUE DISPLAY="Red">Red</VALUE><VALUE DISPLAY="Green">Green</VALUE></VALUELIST>
</VALUELISTS>
</FMPXMLLAYOUT>
'''
