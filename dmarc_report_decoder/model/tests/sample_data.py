from datetime import datetime, timezone
from ipaddress import ip_address

import dmarc_report_decoder.model as m

REPORT_METADATA_XML = """
  <report_metadata>
    <org_name>Test org</org_name>
    <email>noreply@example.com</email>
    <extra_contact_info>https://example.org/dmarc</extra_contact_info>
    <report_id>{report_id}</report_id>
    <date_range>
      <begin>1491782400</begin>
      <end>1491868799</end>
    </date_range>
  </report_metadata>
"""

POLICY_PUBLISHED_XML = """
  <policy_published>
    <domain>example.net</domain>
    <adkim>s</adkim>
    <aspf>r</aspf>
    <p>reject</p>
    <sp>none</sp>
    <pct>100</pct>
  </policy_published>
"""

POLICY_EVALUATED_XML = """
      <policy_evaluated>
        <disposition>none</disposition>
        <dkim>pass</dkim>
        <spf>pass</spf>
      </policy_evaluated>
"""

IDENTIFIERS_XML = """
    <identifiers>
      <header_from>example.net</header_from>
    </identifiers>
"""

AUTH_RESULTS_XML = """
    <auth_results>
      <spf>
        <domain>example.net</domain>
        <result>pass</result>
      </spf>
    </auth_results>
"""


def create_record_xml(
    *,
    source_ip: str = "192.168.34.78",
    count: str = "1",
    policy_evaluated: str = POLICY_EVALUATED_XML,
    identifiers: str = IDENTIFIERS_XML,
    auth_results: str = AUTH_RESULTS_XML,
) -> str:
    return f"""
  <record>
    <row>
      <source_ip>{source_ip}</source_ip>
      <count>{count}</count>
      {policy_evaluated}
    </row>
    {identifiers}
    {auth_results}
  </record>
"""


def create_feedback_xml(
    *,
    records: str = "",
    report_id: str = "123456",
    report_metadata: str = REPORT_METADATA_XML,
    policy_published: str = POLICY_PUBLISHED_XML,
    root_attributes: str = "",
) -> str:
    return f"""
<?xml version="1.0" encoding="UTF-8" ?>
<feedback{root_attributes}>
  {report_metadata.format(report_id=report_id)}
  {policy_published}
  {records}
</feedback>
""".strip()


def create_sample_xml(*, report_id: str = "123456") -> str:
    return create_feedback_xml(
        report_id=report_id,
        records=create_record_xml(
            source_ip="192.168.1.43",
            count="8",
            policy_evaluated="""
      <policy_evaluated>
        <disposition>reject</disposition>
        <dkim>fail</dkim>
        <spf>fail</spf>
      </policy_evaluated>
""",
            auth_results="""
    <auth_results>
      <spf>
        <domain>example.net</domain>
        <result>fail</result>
      </spf>
    </auth_results>
""",
        )
        + create_record_xml(
            source_ip="192.168.34.78",
            count="1",
            auth_results="""
    <auth_results>
      <dkim>
        <domain>example.net</domain>
        <selector>mail</selector>
        <result>pass</result>
      </dkim>
      <spf>
        <domain>example.net</domain>
        <result>pass</result>
      </spf>
    </auth_results>
""",
        ),
    )


SAMPLE_REPORT_METADATA = m.ReportMetadata(
    org_name="Test org",
    email="noreply@example.com",
    extra_contact_info="https://example.org/dmarc",
    report_id="123456",
    date_range=m.DateRange(
        begin=datetime(2017, 4, 10, 0, 0, 0, tzinfo=timezone.utc),
        end=datetime(2017, 4, 10, 23, 59, 59, tzinfo=timezone.utc),
    ),
    errors=(),
)

SAMPLE_POLICY_PUBLISHED = m.PolicyPublished(
    domain="example.net",
    dkim_alignment=m.Alignment.STRICT,
    spf_alignment=m.Alignment.RELAXED,
    domain_policy=m.Disposition.REJECT,
    subdomain_policy=m.Disposition.NONE_VALUE,
    percentage=100,
    failure_reporting=None,
)

SAMPLE_FEEDBACK = m.Feedback(
    report_metadata=SAMPLE_REPORT_METADATA,
    policy_published=SAMPLE_POLICY_PUBLISHED,
    records=(
        m.Record(
            row=m.Row(
                source_ip=ip_address("192.168.1.43"),
                count=8,
                policy_evaluated=m.PolicyEvaluated(
                    disposition=m.Disposition.REJECT,
                    dkim=m.DmarcResult.FAIL,
                    spf=m.DmarcResult.FAIL,
                    reasons=(),
                ),
            ),
            identifiers=m.Identifier(header_from="example.net"),
            auth_results=m.AuthResults(
                spf=(
                    m.SpfAuthResult(domain="example.net", result=m.SpfResult.FAIL),
                ),
                dkim=(),
            ),
        ),
        m.Record(
            row=m.Row(
                source_ip=ip_address("192.168.34.78"),
                count=1,
                policy_evaluated=m.PolicyEvaluated(
                    disposition=m.Disposition.NONE_VALUE,
                    dkim=m.DmarcResult.PASS_VALUE,
                    spf=m.DmarcResult.PASS_VALUE,
                ),
            ),
            identifiers=m.Identifier(header_from="example.net"),
            auth_results=m.AuthResults(
                spf=(
                    m.SpfAuthResult(
                        domain="example.net", result=m.SpfResult.PASS_VALUE
                    ),
                ),
                dkim=(
                    m.DkimAuthResult(
                        domain="example.net",
                        selector="mail",
                        result=m.DkimResult.PASS_VALUE,
                    ),
                ),
            ),
        ),
    ),
)
