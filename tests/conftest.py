"""Shared test helpers: a command runner that records instead of executing."""

IWCONFIG_WLAN0 = (
    'wlan0     IEEE 802.11  ESSID:off/any\n'
    '          Mode:Managed  Access Point: Not-Associated   Tx-Power=31 dBm\n'
)
IWCONFIG_WLAN0_ASSOCIATED = (
    'wlan0     IEEE 802.11  ESSID:"Home"\n'
    '          Mode:Managed  Frequency:2.437 GHz  Access Point: AA:BB:CC:DD:EE:FF\n'
)
IP_ADDR_WLAN0 = (
    "3: wlan0: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc pfifo_fast state UP\n"
    "    inet 192.168.1.23/24 brd 192.168.1.255 scope global dynamic noprefixroute wlan0\n"
    "       valid_lft 85813sec preferred_lft 74913sec\n"
)


class FakeRunner:
    """Records commands instead of running them. Outputs keyed by argv tuple."""

    def __init__(self, outputs=None, failing=()):
        self.outputs = dict(outputs or {})
        self.failing = set(failing)
        self.commands = []
        self.reboot_ok = True

    def run_capture(self, cmd):
        self.commands.append(list(cmd))
        key = tuple(cmd)
        if key in self.failing:
            return False, ""
        return True, self.outputs.get(key, "")

    def run(self, cmd):
        return self.run_capture(cmd)[0]

    def reboot(self):
        self.commands.append(["reboot"])
        return self.reboot_ok

    def ran(self, *cmd):
        return list(cmd) in self.commands

    def count(self, *cmd):
        return self.commands.count(list(cmd))
