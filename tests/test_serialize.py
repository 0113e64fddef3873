import json
from pathlib import Path

from iptables_diff.diff import diff_snapshots
from iptables_diff.model import Chain, Rule, Snapshot, Table, content_uid
from iptables_diff.parser import parse_iptables_save, read_iptables_file
from iptables_diff.serialize import serialize, to_dict

DATA = Path(__file__).parent / "data"


def test_serialize_diff():
    diff = diff_snapshots(read_iptables_file(DATA / "before.rules"), read_iptables_file(DATA / "after.rules"))
    payload = json.loads(serialize(diff))
    assert payload == {
        "tables": {
            "nat": {
                "chains": {
                    "PREROUTING": {
                        "rules": [
                            {"args": "-m addrtype --dst-type LOCAL", "target": "DOCKER", "pktCount": 1, "bytesCount": 2},
                        ]
                    },
                    "DOCKER": {
                        "rules": [
                            {"args": "-i docker1", "target": "RETURN", "pktCount": 5, "bytesCount": 9},
                            {"args": "-i docker2", "target": "RETURN", "pktCount": 0, "bytesCount": 0},
                        ]
                    },
                }
            }
        }
    }


def test_empty_tables_and_chains_are_omitted():
    snapshot = parse_iptables_save("*raw\n:PREROUTING ACCEPT [0:0]\nCOMMIT\n*filter\n:INPUT ACCEPT [0:0]\n:FORWARD DROP [0:0]\n[0:0] -A FORWARD -j ACCEPT\nCOMMIT\n")
    payload = to_dict(snapshot)
    assert list(payload["tables"]) == ["filter"]
    assert list(payload["tables"]["filter"]["chains"]) == ["FORWARD"]


def test_empty_snapshot():
    assert serialize(Snapshot()) == b"{}"


def test_quotes_and_backslashes_are_escaped():
    rule = Rule('-m comment --comment "say \\"hi\\""', 'LOG --log-prefix "x"', 1, 2)
    snapshot = Snapshot({'t"1': Table('t"1', {"C\\1": Chain("C\\1", True, (rule,))})})
    payload = json.loads(serialize(snapshot))
    assert payload["tables"]['t"1']["chains"]["C\\1"]["rules"][0]["args"] == rule.args
    assert payload["tables"]['t"1']["chains"]["C\\1"]["rules"][0]["target"] == rule.target


def test_serialize_is_stable():
    snapshot = read_iptables_file(DATA / "after.rules")
    assert serialize(snapshot) == serialize(snapshot)
    assert serialize(snapshot, indent=2) == serialize(snapshot, indent=2)


def test_include_uid():
    snapshot = parse_iptables_save("*nat\n:DOCKER - [0:0]\n[1:2] -A DOCKER -i docker0 -j RETURN\nCOMMIT\n")
    payload = to_dict(snapshot, include_uid=True)
    table = payload["tables"]["nat"]
    chain = table["chains"]["DOCKER"]
    assert table["uid"] == str(content_uid("nat"))
    assert chain["uid"] == str(content_uid("nat", "DOCKER"))
    assert chain["rules"][0]["uid"] == str(content_uid("nat", "DOCKER", "-i docker0", "RETURN"))
    assert chain["rules"][0]["pktCount"] == 1


def test_uid_is_deterministic():
    rule = Rule("-i docker0", "RETURN", 1, 2)
    assert rule.uid("nat", "DOCKER") == rule.with_counters(9, 9).uid("nat", "DOCKER")
    assert rule.uid("nat", "DOCKER") != rule.uid("filter", "DOCKER")
    assert content_uid("nat").version == 5
