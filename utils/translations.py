"""Portuguese (pt-BR) strings for messages and report generation."""

from typing import Dict

# User-facing messages of the analysis workflow
MESSAGES: Dict[str, str] = {
    "missing_address": "Por favor, insira seu endereço de moradia atual.",
    "missing_sites": "Por favor, cole os dados da planilha (copie as colunas A a G).",
    "analysis_failed": (
        "Ocorreu um erro na análise. Verifique sua conexão e tente novamente."
    ),
    "export_failed": "Não foi possível gerar o PDF do relatório.",
    "analysis_in_progress": "Uma análise já está em andamento.",
}

# Report section headers
HEADERS: Dict[str, str] = {
    "report_title": "SP Route Optimizer",
    "report_subtitle": "Planejamento Logístico via Metrô/Trem",
    "diagnosis": "Diagnóstico Logístico",
    "current_evaluation": "Avaliação Atual",
    "weekly_route": "Padrão de Roteiro (Exemplo de Mobilidade)",
    "monthly_agenda": "Agenda Mensal Consolidada",
    "clusters": "Agrupamentos por Região",
    "housing": "Estratégia de Moradia",
    "conclusion": "Conclusão Logística",
    "sites": "Obras Analisadas",
}

# Field labels
LABELS: Dict[str, str] = {
    "generated": "Gerado em",
    "run_id": "Execução",
    "home_address": "Moradia atual",
    "site_count": "Obras",
    "distance_avg": "Distância média",
    "time_avg": "Tempo médio",
    "critical_regions": "Regiões críticas",
    "efficiency": "Eficiência geral",
    "current_avg_time": "Média atual",
    "suggested_avg_time": "Média otimizada",
    "monthly_savings": "Horas economizadas",
    "travel_time": "Deslocamento",
    "total_time": "Total",
    "week": "Semana",
    "region": "Região",
    "company": "Razão Social",
    "site_name": "Nome da Obra",
    "address": "Endereço",
    "sector": "Setor",
    "city": "Cidade",
    "state": "UF",
    "postal_code": "CEP",
    "page": "Página",
}

# Common phrases
PHRASES: Dict[str, str] = {
    "available": "Disponível",
    "full_shift": "Turno Integral",
    "walking": "min a pé",
    "agenda_subtitle": "Uma visita por obra, distribuída por proximidade de estações.",
    "generated_with": "Gerado com SP Route Optimizer",
    "n/a": "n/d",
}

# Efficiency badge text
EFFICIENCY_LABELS: Dict[str, str] = {
    "Alta": "ALTA EFICIÊNCIA",
    "Média": "MÉDIA EFICIÊNCIA",
    "Baixa": "BAIXA EFICIÊNCIA",
}
