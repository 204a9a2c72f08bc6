"""Prompt text for the logistics analysis request."""

import json
from typing import List

from models.site import SiteRecord

ANALYSIS_PROMPT = """Aja como um Agente Especialista em Logística Urbana de São Paulo (Metrô/CPTM).

DADOS DE ENTRADA:
Moradia: {address}
Obras: {sites_json}

OBJETIVO PRINCIPAL:
Criar uma agenda MENSAL (4 semanas). Cada obra deve ser visitada exatamente 1 vez no mês.
Distribua as visitas de forma equilibrada nos dias úteis, evitando acúmulo em uma só semana.

REGRAS DE NEGÓCIO:
1. DISTRIBUIÇÃO MENSAL: Não coloque todas as obras na primeira semana. Use as 4 semanas do mês.
2. MODAL TRILHOS: Identifique a melhor linha de metrô/trem para cada obra.
3. COMPLEXOS/PROXIMIDADE: Obras muito próximas (mesma rua ou bairro) devem ser visitadas no mesmo dia (máx 3-4 obras se forem um "complexo").
4. CIDADES SATÉLITES: Obras em Mogi, Taboão, etc., devem ocupar um "Turno Integral" devido ao tempo de deslocamento.
5. FORMATO DE ROTA: Inclua no campo 'estimatedTravelTime' a linha utilizada, ex: "45 min (Ida via Linha 1-Azul)".
6. AGENDA: Use apenas as chaves Segunda, Terça, Quarta, Quinta e Sexta em 'schedule' e semanas numeradas de 1 a 4.
7. EFICIÊNCIA: O campo 'efficiency' deve ser exatamente "Alta", "Média" ou "Baixa".
{visit_rules}
NOMES DAS OBRAS: Os nomes como "Rio São Francisco" ou "Rio Madeira" vêm da coluna 'Nome da Obra' (nomeObra). Utilize-os exatamente como informados para identificar os destinos.
"""

DETAILED_VISIT_RULES = """8. VISITAS DETALHADAS: Cada visita deve ser um objeto com 'siteName', 'metroLine' (linha de metrô/trem), 'busConnection' (integração de ônibus, se houver), 'walkingMinutes' (minutos a pé da estação) e 'fullShift' (true se a obra exigir turno integral).
"""


def build_analysis_prompt(
    address: str, sites: List[SiteRecord], detailed_visits: bool = False
) -> str:
    """Embed the home address and the serialized site list into the instruction prompt."""
    sites_json = json.dumps([site.to_dict() for site in sites], ensure_ascii=False)
    return ANALYSIS_PROMPT.format(
        address=address,
        sites_json=sites_json,
        visit_rules=DETAILED_VISIT_RULES if detailed_visits else "",
    )
