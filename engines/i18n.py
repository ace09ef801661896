"""
Contact Centre Cost Calculator - Translations
English / Thai string tables. A Translator instance carries the active
language; lookups fall back to English, then to the key itself.
"""
from engines.calculator import normalize_frequency

DEFAULT_LANGUAGE = 'en'

TRANSLATIONS = {
    'en': {
        'header.title': 'Cost Calculator',
        'header.subtitle': 'Interactive ROI Analysis for Collaborative Sales Sessions',

        'section.clientOps': 'Client Operations',
        'section.channels': 'Channels',
        'section.rates': 'Rates Comparison',
        'section.additionalCosts': 'Additional Costs',
        'section.clientState': 'Client Current State',
        'section.aiSolution': 'AI Solution',
        'section.efficiency': 'Efficiency Offset',
        'section.dashboard': 'Dashboard',
        'section.chartTitle': '24-Month Cost Comparison',

        'field.totalAgents': 'Total Current Agents',
        'field.monthlySalary': 'Avg Monthly Salary per Agent',
        'field.channelName': 'Channel Name',
        'field.volume': 'Volume',
        'field.handleTime': 'Avg Handle Time (Minutes)',
        'field.aiHandleTime': 'AI Handle Time (Minutes)',
        'field.deflectionRate': 'AI Deflection Rate',
        'field.adminHours': 'Admin Hours Saved/Month',
        'field.hourlyRate': 'Hourly Rate',
        'field.costName': 'Cost Name',
        'field.amount': 'Amount',
        'field.frequency': 'Frequency',

        'channel.voice': 'Voice',
        'channel.chat': 'Chat',
        'channel.sms': 'SMS',
        'channel.ivr': 'IVR',
        'channel.perMinute': 'per minute',
        'channel.perMessage': 'per message',
        'channel.perSession': 'per session',

        'freq.oneTime': 'One-time',
        'freq.monthly': 'Monthly',
        'freq.yearly': 'Yearly',
        'freq.perAgent': 'Per Agent',

        'rates.channel': 'Channel',
        'rates.clientRate': 'Client Rate',
        'rates.aiBotRate': 'AI Bot Rate',
        'rates.aiAgentRate': 'AI Agent Rate',

        'metric.currentMonthly': 'Current Monthly Spend',
        'metric.aiMonthly': 'AI Monthly Spend',
        'metric.monthlySavings': 'Monthly Savings',
        'metric.costReduction': 'Cost Reduction',
        'metric.initialInvestment': 'Initial Investment',
        'metric.breakEven': 'Break-Even',
        'metric.year1Savings': 'Year 1 Net Savings',
        'metric.roi': 'Year 1 ROI',

        'derived.agentsReplaced': 'Agents Replaced',
        'derived.trafficToAI': 'Traffic Routed to AI',
        'derived.payrollSaved': 'Payroll Saved',
        'derived.adminValue': 'Admin Value Reclaimed',
        'derived.extraCapacity': 'Extra Interactions Capacity',
        'derived.agentEquivalent': 'Agent Equivalent',

        'chart.currentSystem': 'Current System',
        'chart.aiSolution': 'AI Solution',
        'chart.month': 'Month {n}',

        'toast.enterName': 'Please enter a scenario name',
        'toast.scenarioSaved': 'Scenario "{name}" saved',
        'toast.saveFailed': 'Failed to save scenario',
        'toast.scenarioLoaded': 'Scenario "{name}" loaded',
        'toast.loadFailed': 'Failed to load scenario',
        'toast.scenarioDeleted': 'Scenario "{name}" deleted',
        'toast.deleteFailed': 'Failed to delete scenario',

        'misc.noChannels': 'Add channels above to see rates.',
        'misc.noCostItems': 'No cost items added yet',
        'scenario.saved': 'Saved Scenarios',
        'misc.na': 'N/A',
    },
    'th': {
        'header.title': 'เครื่องคิดเลขต้นทุน',
        'header.subtitle': 'วิเคราะห์ ROI เชิงโต้ตอบสำหรับการขายร่วมกัน',

        'section.clientOps': 'ข้อมูลลูกค้า',
        'section.channels': 'ช่องทาง',
        'section.rates': 'เปรียบเทียบอัตรา',
        'section.additionalCosts': 'ค่าใช้จ่ายเพิ่มเติม',
        'section.clientState': 'สถานะปัจจุบันของลูกค้า',
        'section.aiSolution': 'โซลูชัน AI',
        'section.efficiency': 'ประสิทธิภาพที่เพิ่มขึ้น',
        'section.dashboard': 'แดชบอร์ด',
        'section.chartTitle': 'เปรียบเทียบต้นทุน 24 เดือน',

        'field.totalAgents': 'จำนวนเจ้าหน้าที่ปัจจุบัน',
        'field.monthlySalary': 'เงินเดือนเฉลี่ยต่อเจ้าหน้าที่',
        'field.channelName': 'ชื่อช่องทาง',
        'field.volume': 'ปริมาณ',
        'field.handleTime': 'เวลาจัดการเฉลี่ย (นาที)',
        'field.aiHandleTime': 'เวลาจัดการ AI (นาที)',
        'field.deflectionRate': 'อัตรา AI Deflection',
        'field.adminHours': 'ชั่วโมง Admin ที่ประหยัด/เดือน',
        'field.hourlyRate': 'อัตราต่อชั่วโมง',
        'field.costName': 'ชื่อรายการ',
        'field.amount': 'จำนวนเงิน',

        'channel.voice': 'เสียง',
        'channel.chat': 'แชท',
        'channel.sms': 'SMS',
        'channel.perMinute': 'ต่อนาที',
        'channel.perMessage': 'ต่อข้อความ',
        'channel.perSession': 'ต่อเซสชัน',

        'freq.oneTime': 'ครั้งเดียว',
        'freq.monthly': 'รายเดือน',
        'freq.yearly': 'รายปี',
        'freq.perAgent': 'ต่อเจ้าหน้าที่',

        'rates.channel': 'ช่องทาง',
        'rates.clientRate': 'อัตราลูกค้า',

        'metric.currentMonthly': 'ค่าใช้จ่ายรายเดือนปัจจุบัน',
        'metric.aiMonthly': 'ค่าใช้จ่าย AI รายเดือน',
        'metric.monthlySavings': 'ประหยัดรายเดือน',
        'metric.costReduction': 'ลดต้นทุน',
        'metric.initialInvestment': 'เงินลงทุนเริ่มต้น',
        'metric.breakEven': 'จุดคุ้มทุน',
        'metric.year1Savings': 'ประหยัดสุทธิปีที่ 1',

        'derived.agentsReplaced': 'เจ้าหน้าที่ที่ทดแทน',
        'derived.trafficToAI': 'ปริมาณงานที่ส่งให้ AI',
        'derived.payrollSaved': 'เงินเดือนที่ประหยัด',
        'derived.adminValue': 'มูลค่า Admin ที่ได้คืน',

        'chart.currentSystem': 'ระบบปัจจุบัน',
        'chart.aiSolution': 'โซลูชัน AI',
        'chart.month': 'เดือน {n}',

        'toast.enterName': 'กรุณาใส่ชื่อสถานการณ์',
        'toast.scenarioSaved': 'บันทึกสถานการณ์ "{name}" แล้ว',
        'toast.saveFailed': 'ไม่สามารถบันทึกสถานการณ์ได้',
        'toast.scenarioLoaded': 'โหลดสถานการณ์ "{name}" แล้ว',
        'toast.loadFailed': 'ไม่สามารถโหลดสถานการณ์ได้',
        'toast.scenarioDeleted': 'ลบสถานการณ์ "{name}" แล้ว',
        'toast.deleteFailed': 'ไม่สามารถลบสถานการณ์ได้',

        'misc.noChannels': 'เพิ่มช่องทางด้านบนเพื่อดูอัตรา',
        'misc.noCostItems': 'ยังไม่มีรายการค่าใช้จ่าย',
        'scenario.saved': 'สถานการณ์ที่บันทึกไว้',
        'misc.na': 'N/A',
    },
}

SUPPORTED_LANGUAGES = tuple(TRANSLATIONS)

FREQUENCY_KEYS = {
    'one-time': 'freq.oneTime', 'monthly': 'freq.monthly',
    'yearly': 'freq.yearly', 'per agent': 'freq.perAgent',
}


class Translator:
    def __init__(self, language=DEFAULT_LANGUAGE):
        self.language = language if language in TRANSLATIONS else DEFAULT_LANGUAGE

    def set_language(self, language):
        """Switch language; unsupported codes are ignored. Returns True on switch."""
        if language not in TRANSLATIONS:
            return False
        self.language = language
        return True

    def t(self, key, **params):
        text = (TRANSLATIONS[self.language].get(key)
                or TRANSLATIONS[DEFAULT_LANGUAGE].get(key)
                or key)
        for name, value in params.items():
            text = text.replace('{' + name + '}', str(value))
        return text

    def table(self):
        """Full table for the active language, English filling the gaps."""
        merged = dict(TRANSLATIONS[DEFAULT_LANGUAGE])
        merged.update(TRANSLATIONS[self.language])
        return merged

    def frequency_label(self, frequency):
        return self.t(FREQUENCY_KEYS[normalize_frequency(frequency)])

    def channel_label(self, channel_type):
        ctype = str(channel_type or '').strip().lower()
        return self.t(f'channel.{ctype}') if ctype else self.t('misc.na')
