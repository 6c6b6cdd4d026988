"""
Recommendation texts and report phrase templates
"""

RECOMMENDATIONS = {
    "BMI_LOW": "BMI: Optimize nutrition to reach a healthy weight and regularize ovulation.",
    "BMI_HIGH": "BMI: Start a diet and exercise plan. Losing 5% of body weight can significantly improve fertility.",
    "CYCLE_IRREGULAR": "Irregular cycles can signal ovulation problems and call for a hormonal work-up to determine the cause.",
    "PCOS": "PCOS: Ask about ovulation induction (e.g. letrozole) as first-line treatment.",
    "ENDO_MILD": "Endometriosis grade I-II: Spontaneous or timed conception can be attempted; consider treatment if unsuccessful.",
    "ENDO_SEVERE": "Endometriosis grade III-IV: Direct assessment for IVF is recommended, as the spontaneous prognosis is low.",
    "MYOMA_SUBMUCOSAL": "Submucosal myoma: Hysteroscopic resection is recommended to improve implantation.",
    "MYOMA_INTRAMURAL": "Significant intramural myoma: Discuss the option of myomectomy with your physician.",
    "ADENO_FOCAL": "Focal adenomyosis: Consider medical treatment to control symptoms and improve receptivity.",
    "ADENO_DIFFUSE": "Diffuse adenomyosis: Assessment for IVF is recommended, as spontaneous fertility is markedly reduced.",
    "POLYP": "Endometrial polyp: Hysteroscopic polypectomy is recommended to optimize the endometrial cavity.",
    "HSG_UNILATERAL": "HSG - Unilateral obstruction: Consider follicular monitoring to time intercourse with ovulation on the patent side.",
    "HSG_BILATERAL": "HSG - Bilateral obstruction: Spontaneous conception is not viable. IVF is required.",
    "HSG_MALFORMATION": "HSG - Uterine defect: Hysteroscopy is required for diagnosis and treatment.",
    "AMH_LOW": "AMH - Diminished ovarian reserve: Do not delay consultation and treatment with a specialist.",
    "AMH_HIGH": "AMH - High ovarian reserve: Rule out polycystic ovary syndrome with your specialist.",
    "PRL_HIGH": "Elevated prolactin: Requires treatment with dopamine agonists (e.g. cabergoline) and endocrinology follow-up.",
    "TSH_HIGH": "TSH not optimal for fertility (target < 2.5): Replacement therapy and endocrinology follow-up are recommended.",
    "HOMA_HIGH": "HOMA - Insulin resistance: Prioritize lifestyle changes and consider metformin.",
    "MALE_FACTOR": "Male factor: Abnormal semen analysis findings. Consultation with an andrologist/urologist is recommended.",
    "OTB": "Prior tubal ligation: Spontaneous pregnancy is not possible. Discuss tubal reanastomosis or IVF with a specialist.",
}

PHRASES = {
    "GOOD": "Your per-cycle prognosis for spontaneous conception is GOOD: {value:.1f}% per cycle ({annual:.1f}% over 12 months).",
    "MODERATE": "Your prognosis is MODERATE: {value:.1f}% per cycle ({annual:.1f}% over 12 months). Some factors can be optimized.",
    "LOW": "Your prognosis is LOW: {value:.1f}% per cycle ({annual:.1f}% over 12 months). A specialist evaluation is recommended.",
    "REQUIRES_TREATMENT": "Spontaneous pregnancy is not possible due to {reason} ({value:.1f}% per cycle). Treatment is required.",
}

BLOCKER_REASONS = {
    "otb": "prior tubal ligation",
    "hsg": "bilateral tubal obstruction",
}

BENCHMARK_PHRASE = (
    "Your result is {comparison} the average for your age group ({age_group} years), "
    "whose reference prognosis is {benchmark:.1f}% per cycle."
)

BENCHMARK_NOT_APPLICABLE = "Comparison not applicable due to {reason}."
