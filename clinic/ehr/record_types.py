from __future__ import annotations


class EHRRecordTypes:
    LabRecord = 'LabRecord'
    BloodPressure = 'BloodPressure'
    BodyHeight = 'BodyHeight'
    BodyWeight = 'BodyWeight'
    BloodGlucose = 'BloodGlucose'

    ALL = (LabRecord, BloodPressure, BodyHeight, BodyWeight, BloodGlucose)


# record type -> (LOINC code, LOINC display)
LOINC_CODES = {
    EHRRecordTypes.BloodPressure: ('85354-9', 'Blood pressure panel with all children optional'),
    EHRRecordTypes.BodyHeight: ('8302-2', 'Body height'),
    EHRRecordTypes.BodyWeight: ('29463-7', 'Body weight'),
    EHRRecordTypes.BloodGlucose: ('2339-0', 'Glucose [Mass/volume] in Blood'),
    EHRRecordTypes.LabRecord: ('26436-6', 'Laboratory studies (set)'),
}

SYSTOLIC_LOINC = ('8480-6', 'Systolic blood pressure')
DIASTOLIC_LOINC = ('8462-4', 'Diastolic blood pressure')
